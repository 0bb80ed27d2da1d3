from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from personnel.db.session import get_db
from personnel.repositories import PayrollRepository
from personnel.schemas.hr import PayrollFilter, PayrollListOut, PayrollRecordInput, PayrollRecordOut

router = APIRouter(tags=["payroll"])


def get_payroll_repository(db: Session = Depends(get_db)) -> PayrollRepository:
    return PayrollRepository(db)


@router.get("/payroll", response_model=PayrollListOut)
def list_payroll(
    employee_id: int | None = Query(default=None, alias="employeeId"),
    period: str | None = Query(default=None),
    repo: PayrollRepository = Depends(get_payroll_repository),
) -> PayrollListOut:
    payroll_filter = PayrollFilter(employee_id=employee_id, period=period)
    return PayrollListOut(items=repo.list(payroll_filter), aggregates=repo.totals(payroll_filter))


@router.post("/payroll", response_model=PayrollRecordOut, status_code=status.HTTP_201_CREATED)
def create_payroll_record(
    payload: PayrollRecordInput,
    repo: PayrollRepository = Depends(get_payroll_repository),
) -> PayrollRecordOut:
    return repo.create(payload)
