from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session, aliased

from personnel.db.filters import REVIEW_FILTERS, REVIEW_UPDATABLE_COLUMNS, build_assignments, build_filter
from personnel.exceptions import InvalidTransition, NotFound
from personnel.models.hr import Employee, PerformanceReview, ReviewState
from personnel.repositories.base import Repository, check_id_range, reject, require_id, require_text
from personnel.repositories.employees import EmployeeRepository
from personnel.schemas.hr import (
    PerformanceReviewInput,
    PerformanceReviewOut,
    PerformanceReviewUpdate,
    ReviewEmployeeAggregate,
    ReviewFilter,
)

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

# Forward-only: draft -> submitted -> approved. Nothing else is legal.
NEXT_STATE: dict[ReviewState, ReviewState] = {
    ReviewState.DRAFT: ReviewState.SUBMITTED,
    ReviewState.SUBMITTED: ReviewState.APPROVED,
}
PREVIOUS_STATE: dict[ReviewState, ReviewState] = {after: before for before, after in NEXT_STATE.items()}


def is_valid_transition(current: str, requested: str) -> bool:
    try:
        return NEXT_STATE.get(ReviewState(current)) == ReviewState(requested)
    except ValueError:
        return False


def validate_rating(rating: int | None) -> int:
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        raise reject("rating", f"must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def _review_columns() -> tuple[Any, ...]:
    return (
        PerformanceReview.id,
        PerformanceReview.employee_id,
        Employee.name.label("employee_name"),
        PerformanceReview.period,
        PerformanceReview.reviewer,
        PerformanceReview.rating,
        func.coalesce(PerformanceReview.strengths, "").label("strengths"),
        func.coalesce(PerformanceReview.opportunities, "").label("opportunities"),
        PerformanceReview.state,
    )


def _select_reviews() -> Select:
    return select(*_review_columns()).join(Employee, Employee.id == PerformanceReview.employee_id)


class ReviewRepository(Repository):
    """Performance reviews: creation, partial edits, the approval state machine, and per-employee stats."""

    def get(self, id: int) -> PerformanceReviewOut:
        with self._unit_of_work("get performance review") as db:
            return self._fetch(db, id)

    def create(self, data: PerformanceReviewInput) -> PerformanceReviewOut:
        employee_id = require_id("employeeId", data.employee_id)
        period = require_text("period", data.period)
        reviewer = require_text("reviewer", data.reviewer)
        rating = validate_rating(data.rating)

        with self._unit_of_work("create performance review") as db:
            EmployeeRepository(db).get(employee_id)

            review = PerformanceReview(
                employee_id=employee_id,
                period=period,
                reviewer=reviewer,
                rating=rating,
                strengths=(data.strengths or "").strip(),
                opportunities=(data.opportunities or "").strip(),
                # Always starts in draft regardless of input.
                state=ReviewState.DRAFT.value,
            )
            db.add(review)
            db.commit()
            logger.info("Created performance review id=%s employee_id=%s period=%s", review.id, employee_id, period)
            return self._fetch(db, review.id)

    def update(self, id: int, changes: PerformanceReviewUpdate) -> PerformanceReviewOut:
        """
        Apply only the supplied fields. State is never touched here.

        With nothing supplied this is a read of the current record.
        """

        values: dict[str, Any] = {
            "reviewer": require_text("reviewer", changes.reviewer) if changes.reviewer is not None else None,
            "rating": validate_rating(changes.rating) if changes.rating is not None else None,
            "strengths": changes.strengths.strip() if changes.strengths is not None else None,
            "opportunities": changes.opportunities.strip() if changes.opportunities is not None else None,
        }
        assignments = build_assignments(REVIEW_UPDATABLE_COLUMNS, values)

        with self._unit_of_work("update performance review") as db:
            if not assignments:
                return self._fetch(db, id)

            result = db.execute(
                update(PerformanceReview).where(PerformanceReview.id == id).values(**assignments),
                execution_options={"synchronize_session": False},
            )
            if result.rowcount == 0:
                raise NotFound("performance review", id)
            db.commit()
            logger.info("Updated performance review id=%s fields=%s", id, sorted(assignments))
            return self._fetch(db, id)

    def transition(self, id: int, requested_state: str) -> PerformanceReviewOut:
        """
        Move a review one step forward.

        The write is a compare-and-swap on the only state the target may be
        reached from, so two concurrent callers cannot both advance the same
        review. When nothing was written, the row is read to tell NotFound from
        InvalidTransition.
        """

        requested_state = require_text("state", requested_state)
        try:
            target: ReviewState | None = ReviewState(requested_state)
        except ValueError:
            target = None

        with self._unit_of_work("transition performance review") as db:
            expected = PREVIOUS_STATE.get(target) if target is not None else None
            if expected is not None:
                result = db.execute(
                    update(PerformanceReview)
                    .where(PerformanceReview.id == id, PerformanceReview.state == expected.value)
                    .values(state=target.value),
                    execution_options={"synchronize_session": False},
                )
                if result.rowcount == 1:
                    db.commit()
                    logger.info("Performance review id=%s moved %s -> %s", id, expected.value, target.value)
                    return self._fetch(db, id)

            current = db.scalar(select(PerformanceReview.state).where(PerformanceReview.id == id))
            if current is None:
                raise NotFound("performance review", id)

            logger.info("Rejected transition for performance review id=%s: %s -> %s", id, current, requested_state)
            raise InvalidTransition(current, requested_state)

    def list(self, filter: ReviewFilter | None = None) -> list[PerformanceReviewOut]:
        built = build_filter(REVIEW_FILTERS, _constraints(filter))
        with self._unit_of_work("list performance reviews") as db:
            stmt = _select_reviews().where(*built.clauses).order_by(PerformanceReview.id.desc())
            return [PerformanceReviewOut.model_validate(dict(row._mapping)) for row in db.execute(stmt)]

    def aggregate(self, filter: ReviewFilter | None = None) -> list[ReviewEmployeeAggregate]:
        """
        Per-employee average rating, count, and latest state over the matching reviews.

        "Latest" is the highest review id among the matching rows (there is no
        timestamp column). Employees without a matching review do not appear.
        """

        built = build_filter(REVIEW_FILTERS, _constraints(filter))
        stats = (
            select(
                PerformanceReview.employee_id.label("employee_id"),
                func.avg(PerformanceReview.rating).label("average_rating"),
                func.count(PerformanceReview.id).label("review_count"),
                func.max(PerformanceReview.id).label("latest_id"),
            )
            .where(*built.clauses)
            .group_by(PerformanceReview.employee_id)
            .subquery()
        )
        latest = aliased(PerformanceReview)
        stmt = (
            select(
                stats.c.employee_id,
                Employee.name.label("employee_name"),
                stats.c.average_rating,
                latest.state.label("latest_state"),
                stats.c.review_count,
            )
            .select_from(stats)
            .join(Employee, Employee.id == stats.c.employee_id)
            .join(latest, latest.id == stats.c.latest_id)
            .order_by(stats.c.employee_id)
        )

        with self._unit_of_work("aggregate performance reviews") as db:
            return [
                ReviewEmployeeAggregate(
                    employee_id=row.employee_id,
                    employee_name=row.employee_name,
                    average_rating=float(row.average_rating),
                    latest_state=row.latest_state,
                    count=row.review_count,
                )
                for row in db.execute(stmt)
            ]

    def _fetch(self, db: Session, id: int) -> PerformanceReviewOut:
        row = db.execute(_select_reviews().where(PerformanceReview.id == id)).first()
        if row is None:
            raise NotFound("performance review", id)
        return PerformanceReviewOut.model_validate(dict(row._mapping))


def _constraints(filter: ReviewFilter | None) -> dict[str, Any]:
    if filter is None:
        return {}
    return {
        "employee_id": check_id_range("employeeId", filter.employee_id),
        "period": filter.period,
        "state": filter.state,
    }
