from __future__ import annotations

from enum import Enum

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from personnel.db.base import Base


class ReviewState(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Deletion is left to the FK cascade in the store; the ORM must not try to null out children.
    performance_reviews: Mapped[list["PerformanceReview"]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payroll_records: Mapped[list["PayrollRecord"]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PerformanceReview(Base):
    __tablename__ = "performance_reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_performance_reviews_rating"),
        Index("idx_reviews_employee_period", "employee_id", "period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)

    period: Mapped[str] = mapped_column(String(50), nullable=False)
    reviewer: Mapped[str] = mapped_column(String(200), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    strengths: Mapped[str | None] = mapped_column(Text, nullable=True)
    opportunities: Mapped[str | None] = mapped_column(Text, nullable=True)

    state: Mapped[str] = mapped_column(String(20), nullable=False, default=ReviewState.DRAFT.value)

    employee: Mapped[Employee] = relationship(back_populates="performance_reviews")


class PayrollRecord(Base):
    __tablename__ = "payroll_records"
    __table_args__ = (Index("idx_payroll_employee_period", "employee_id", "period"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)

    period: Mapped[str] = mapped_column(String(50), nullable=False)
    base_salary: Mapped[float] = mapped_column(Float, nullable=False)
    overtime_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    overtime_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    bonuses: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    deductions: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Stored at creation for stable historical reporting; records are never updated.
    net_pay: Mapped[float] = mapped_column(Float, nullable=False)

    employee: Mapped[Employee] = relationship(back_populates="payroll_records")
