from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel.db.base import Base
from personnel.db.session import SessionLocal, engine
from personnel.models import hr  # noqa: F401  (register tables on Base.metadata)
from personnel.models.hr import Employee
from personnel.repositories import EmployeeRepository, PayrollRepository, ReviewRepository
from personnel.schemas.hr import PayrollRecordInput, PerformanceReviewInput

logger = logging.getLogger(__name__)


def init_db(seed: bool = False) -> None:
    """
    Create tables and, when asked, seed demo data.

    The seed is small and deterministic and only runs against an empty store.
    """

    Base.metadata.create_all(bind=engine)

    if not seed:
        return

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        _seed(db)
        logger.info("Seeded demo data")


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Employee.id).limit(1)).first() is not None


def _seed(db: Session) -> None:
    employees = EmployeeRepository(db)
    reviews = ReviewRepository(db)
    payroll = PayrollRepository(db)

    ada = employees.create("Ada Lovelace")
    alan = employees.create("Alan Turing")
    grace = employees.create("Grace Hopper")

    r1 = reviews.create(
        PerformanceReviewInput(
            employee_id=ada.id,
            period="2024-Q3",
            reviewer="Charles Babbage",
            rating=5,
            strengths="Analytical depth",
            opportunities="Delegation",
        )
    )
    reviews.transition(r1.id, "submitted")
    reviews.transition(r1.id, "approved")

    r2 = reviews.create(
        PerformanceReviewInput(employee_id=alan.id, period="2024-Q3", reviewer="Max Newman", rating=4)
    )
    reviews.transition(r2.id, "submitted")

    reviews.create(PerformanceReviewInput(employee_id=grace.id, period="2024-Q4", reviewer="Howard Aiken", rating=3))

    payroll.create(PayrollRecordInput(employee_id=ada.id, period="2024-11", base_salary=5200.0, bonuses=300.0))
    payroll.create(
        PayrollRecordInput(
            employee_id=alan.id,
            period="2024-11",
            base_salary=4800.0,
            overtime_hours=6.0,
            overtime_rate=45.0,
            deductions=120.0,
        )
    )
    payroll.create(PayrollRecordInput(employee_id=grace.id, period="2024-12", base_salary=5000.0))
