from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from personnel.db.session import get_db
from personnel.repositories import ReviewRepository
from personnel.schemas.hr import (
    PerformanceReviewInput,
    PerformanceReviewOut,
    PerformanceReviewUpdate,
    ReviewFilter,
    ReviewListOut,
    ReviewTransitionIn,
)

router = APIRouter(tags=["performance_reviews"])


def get_review_repository(db: Session = Depends(get_db)) -> ReviewRepository:
    return ReviewRepository(db)


@router.get("/reviews", response_model=ReviewListOut)
def list_reviews(
    employee_id: int | None = Query(default=None, alias="employeeId"),
    period: str | None = Query(default=None),
    state: str | None = Query(default=None),
    repo: ReviewRepository = Depends(get_review_repository),
) -> ReviewListOut:
    review_filter = ReviewFilter(employee_id=employee_id, period=period, state=state)
    return ReviewListOut(items=repo.list(review_filter), aggregates=repo.aggregate(review_filter))


@router.post("/reviews", response_model=PerformanceReviewOut, status_code=status.HTTP_201_CREATED)
def create_review(
    payload: PerformanceReviewInput,
    repo: ReviewRepository = Depends(get_review_repository),
) -> PerformanceReviewOut:
    return repo.create(payload)


@router.put("/reviews/{id}", response_model=PerformanceReviewOut)
def update_review(
    id: int,
    payload: PerformanceReviewUpdate,
    repo: ReviewRepository = Depends(get_review_repository),
) -> PerformanceReviewOut:
    return repo.update(id, payload)


@router.put("/reviews/{id}/status", response_model=PerformanceReviewOut)
def transition_review(
    id: int,
    payload: ReviewTransitionIn,
    repo: ReviewRepository = Depends(get_review_repository),
) -> PerformanceReviewOut:
    return repo.transition(id, payload.state)
