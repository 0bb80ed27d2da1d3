from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from personnel.db.filters import PAYROLL_FILTERS, build_filter
from personnel.exceptions import NotFound
from personnel.models.hr import Employee, PayrollRecord
from personnel.repositories.base import (
    Repository,
    check_id_range,
    require_finite,
    require_id,
    require_non_negative,
    require_text,
)
from personnel.repositories.employees import EmployeeRepository
from personnel.schemas.hr import PayrollFilter, PayrollPeriodTotal, PayrollRecordInput, PayrollRecordOut, PayrollTotals

logger = logging.getLogger(__name__)


def calculate_net_pay(
    base_salary: float,
    overtime_hours: float,
    overtime_rate: float,
    bonuses: float,
    deductions: float,
) -> float:
    """Plain float arithmetic, no rounding: base + overtime pay + bonuses - deductions."""
    return base_salary + (overtime_hours * overtime_rate) + bonuses - deductions


def _select_payroll() -> Select:
    return select(
        PayrollRecord.id,
        PayrollRecord.employee_id,
        Employee.name.label("employee_name"),
        PayrollRecord.period,
        PayrollRecord.base_salary,
        PayrollRecord.overtime_hours,
        PayrollRecord.overtime_rate,
        PayrollRecord.bonuses,
        PayrollRecord.deductions,
        PayrollRecord.net_pay,
    ).join(Employee, Employee.id == PayrollRecord.employee_id)


class PayrollRepository(Repository):
    def get(self, id: int) -> PayrollRecordOut:
        with self._unit_of_work("get payroll record") as db:
            return self._fetch(db, id)

    def create(self, data: PayrollRecordInput) -> PayrollRecordOut:
        employee_id = require_id("employeeId", data.employee_id)
        period = require_text("period", data.period)
        base_salary = require_non_negative("baseSalary", data.base_salary)
        overtime_hours = require_non_negative("overtimeHours", data.overtime_hours)
        overtime_rate = require_non_negative("overtimeRate", data.overtime_rate)
        bonuses = require_finite("bonuses", data.bonuses)
        deductions = require_finite("deductions", data.deductions)

        net_pay = calculate_net_pay(base_salary, overtime_hours, overtime_rate, bonuses, deductions)

        with self._unit_of_work("create payroll record") as db:
            EmployeeRepository(db).get(employee_id)

            record = PayrollRecord(
                employee_id=employee_id,
                period=period,
                base_salary=base_salary,
                overtime_hours=overtime_hours,
                overtime_rate=overtime_rate,
                bonuses=bonuses,
                deductions=deductions,
                net_pay=net_pay,
            )
            db.add(record)
            db.commit()
            logger.info("Created payroll record id=%s employee_id=%s period=%s", record.id, employee_id, period)
            return self._fetch(db, record.id)

    def list(self, filter: PayrollFilter | None = None) -> list[PayrollRecordOut]:
        built = build_filter(PAYROLL_FILTERS, _constraints(filter))
        stmt = _select_payroll().where(*built.clauses).order_by(PayrollRecord.period.desc(), PayrollRecord.id.desc())
        with self._unit_of_work("list payroll records") as db:
            return [PayrollRecordOut.model_validate(dict(row._mapping)) for row in db.execute(stmt)]

    def totals(self, filter: PayrollFilter | None = None) -> PayrollTotals:
        """Net pay summed per period (newest period first) plus the grand total of those sums."""

        built = build_filter(PAYROLL_FILTERS, _constraints(filter))
        stmt = (
            select(PayrollRecord.period, func.sum(PayrollRecord.net_pay).label("total_net"))
            .where(*built.clauses)
            .group_by(PayrollRecord.period)
            .order_by(PayrollRecord.period.desc())
        )
        with self._unit_of_work("payroll totals") as db:
            per_period = [PayrollPeriodTotal(period=row.period, total_net=float(row.total_net)) for row in db.execute(stmt)]

        grand_total = 0.0
        for entry in per_period:
            grand_total += entry.total_net
        return PayrollTotals(totals_by_period=per_period, grand_total_net=grand_total)

    def _fetch(self, db: Session, id: int) -> PayrollRecordOut:
        row = db.execute(_select_payroll().where(PayrollRecord.id == id)).first()
        if row is None:
            raise NotFound("payroll record", id)
        return PayrollRecordOut.model_validate(dict(row._mapping))


def _constraints(filter: PayrollFilter | None) -> dict[str, Any]:
    if filter is None:
        return {}
    return {"employee_id": check_id_range("employeeId", filter.employee_id), "period": filter.period}
