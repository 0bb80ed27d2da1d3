from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from personnel.models.hr import ReviewState


class _Value(BaseModel):
    """Immutable value handed back to callers (never the ORM instance)."""

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _Input(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Employees


class EmployeeOut(_Value):
    id: int
    name: str


class EmployeeIn(_Input):
    name: str = ""


# Performance reviews


class PerformanceReviewOut(_Value):
    id: int
    employee_id: int
    employee_name: str
    period: str
    reviewer: str
    rating: int
    strengths: str
    opportunities: str
    state: ReviewState


class PerformanceReviewInput(_Input):
    employee_id: int | None = None
    period: str = ""
    reviewer: str = ""
    rating: int = 0
    strengths: str = ""
    opportunities: str = ""


class PerformanceReviewUpdate(_Input):
    """Partial update: a field left as None is not touched."""

    reviewer: str | None = None
    rating: int | None = None
    strengths: str | None = None
    opportunities: str | None = None


class ReviewTransitionIn(_Input):
    state: str = ""


class ReviewFilter(_Input):
    employee_id: int | None = None
    period: str | None = None
    state: str | None = None


class ReviewEmployeeAggregate(_Value):
    employee_id: int
    employee_name: str
    average_rating: float
    latest_state: ReviewState
    count: int


class ReviewListOut(_Value):
    items: list[PerformanceReviewOut]
    aggregates: list[ReviewEmployeeAggregate]


# Payroll


class PayrollRecordOut(_Value):
    id: int
    employee_id: int
    employee_name: str
    period: str
    base_salary: float
    overtime_hours: float
    overtime_rate: float
    bonuses: float
    deductions: float
    net_pay: float


class PayrollRecordInput(_Input):
    employee_id: int | None = None
    period: str = ""
    base_salary: float = 0.0
    overtime_hours: float = 0.0
    overtime_rate: float = 0.0
    bonuses: float = 0.0
    deductions: float = 0.0


class PayrollFilter(_Input):
    employee_id: int | None = None
    period: str | None = None


class PayrollPeriodTotal(_Value):
    period: str
    total_net: float


class PayrollTotals(_Value):
    totals_by_period: list[PayrollPeriodTotal]
    grand_total_net: float


class PayrollListOut(_Value):
    items: list[PayrollRecordOut]
    aggregates: PayrollTotals
