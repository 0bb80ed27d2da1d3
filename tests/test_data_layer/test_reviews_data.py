"""
Tests for the performance review repository: creation, partial updates,
the draft -> submitted -> approved state machine, listing and aggregates.
"""
from __future__ import annotations

import pytest

from personnel.exceptions import InvalidTransition, NotFound, ValidationError
from personnel.models.hr import ReviewState
from personnel.repositories.reviews import is_valid_transition
from personnel.schemas.hr import PerformanceReviewInput, PerformanceReviewUpdate, ReviewFilter


def _review(employee_id: int, period: str = "2024-Q4", rating: int = 4, **extra) -> PerformanceReviewInput:
    return PerformanceReviewInput(employee_id=employee_id, period=period, reviewer="Rita", rating=rating, **extra)


@pytest.fixture
def alice(employees):
    return employees.create("Alice")


@pytest.fixture
def bob(employees):
    return employees.create("Bob")


def test_create_review_echoes_trimmed_input_in_draft(reviews, alice):
    created = reviews.create(
        PerformanceReviewInput(
            employee_id=alice.id,
            period=" 2024-Q4 ",
            reviewer="  Rita ",
            rating=5,
            strengths=" focus ",
            opportunities=" delegation\n",
        )
    )

    assert created.id > 0
    assert created.employee_id == alice.id
    assert created.employee_name == "Alice"
    assert created.period == "2024-Q4"
    assert created.reviewer == "Rita"
    assert created.rating == 5
    assert created.strengths == "focus"
    assert created.opportunities == "delegation"
    assert created.state == ReviewState.DRAFT


def test_create_review_optional_text_defaults_to_empty(reviews, alice):
    created = reviews.create(_review(alice.id))
    assert created.strengths == ""
    assert created.opportunities == ""


def test_create_review_assigns_unique_ids(reviews, alice):
    ids = {reviews.create(_review(alice.id)).id for _ in range(3)}
    assert len(ids) == 3


@pytest.mark.parametrize(
    ("changes", "field"),
    [
        ({"employee_id": None}, "employeeId"),
        ({"employee_id": 0}, "employeeId"),
        ({"period": "  "}, "period"),
        ({"reviewer": ""}, "reviewer"),
        ({"rating": 0}, "rating"),
        ({"rating": 6}, "rating"),
    ],
)
def test_create_review_validation(reviews, alice, changes, field):
    data = {"employee_id": alice.id, "period": "2024-Q4", "reviewer": "Rita", "rating": 3}
    data.update(changes)

    with pytest.raises(ValidationError) as exc_info:
        reviews.create(PerformanceReviewInput(**data))

    assert exc_info.value.field == field
    assert reviews.list() == []


def test_create_review_unknown_employee(reviews):
    with pytest.raises(NotFound) as exc_info:
        reviews.create(_review(424242))
    assert exc_info.value.entity == "employee"


def test_update_with_no_fields_returns_current_record(reviews, alice):
    created = reviews.create(_review(alice.id, strengths="x"))

    updated = reviews.update(created.id, PerformanceReviewUpdate())

    assert updated == created


def test_update_only_touches_supplied_fields(reviews, alice):
    created = reviews.create(_review(alice.id, rating=2, strengths="old", opportunities="keep"))

    updated = reviews.update(created.id, PerformanceReviewUpdate(reviewer="  Ralph ", strengths=" new "))

    assert updated.reviewer == "Ralph"
    assert updated.strengths == "new"
    assert updated.rating == 2
    assert updated.opportunities == "keep"
    assert updated.period == created.period
    assert updated.state == ReviewState.DRAFT


def test_update_rating(reviews, alice):
    created = reviews.create(_review(alice.id, rating=2))
    assert reviews.update(created.id, PerformanceReviewUpdate(rating=5)).rating == 5


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_update_out_of_range_rating_leaves_record_unchanged(reviews, alice, rating):
    created = reviews.create(_review(alice.id, rating=3))

    with pytest.raises(ValidationError) as exc_info:
        reviews.update(created.id, PerformanceReviewUpdate(rating=rating, reviewer="Someone Else"))

    assert exc_info.value.field == "rating"
    assert reviews.get(created.id) == created


def test_update_not_found(reviews):
    with pytest.raises(NotFound):
        reviews.update(999, PerformanceReviewUpdate(reviewer="X"))


def test_update_not_found_without_fields(reviews):
    with pytest.raises(NotFound):
        reviews.update(999, PerformanceReviewUpdate())


def test_update_does_not_change_state(reviews, alice):
    created = reviews.create(_review(alice.id))
    reviews.transition(created.id, "submitted")

    updated = reviews.update(created.id, PerformanceReviewUpdate(rating=1))

    assert updated.state == ReviewState.SUBMITTED


def test_transition_forward_sequence(reviews, alice):
    created = reviews.create(_review(alice.id))

    submitted = reviews.transition(created.id, "submitted")
    approved = reviews.transition(created.id, "approved")

    assert submitted.state == ReviewState.SUBMITTED
    assert approved.state == ReviewState.APPROVED
    assert approved.rating == created.rating
    assert approved.employee_name == "Alice"


def test_transition_skip_is_rejected(reviews, alice):
    created = reviews.create(_review(alice.id))

    with pytest.raises(InvalidTransition) as exc_info:
        reviews.transition(created.id, "approved")

    assert exc_info.value.from_state == "draft"
    assert exc_info.value.to_state == "approved"
    assert reviews.get(created.id).state == ReviewState.DRAFT


def test_transition_backward_is_rejected(reviews, alice):
    created = reviews.create(_review(alice.id))
    reviews.transition(created.id, "submitted")
    reviews.transition(created.id, "approved")

    with pytest.raises(InvalidTransition):
        reviews.transition(created.id, "submitted")
    with pytest.raises(InvalidTransition):
        reviews.transition(created.id, "draft")

    assert reviews.get(created.id).state == ReviewState.APPROVED


@pytest.mark.parametrize("state", ["draft", "submitted"])
def test_transition_to_same_state_is_rejected(reviews, alice, state):
    created = reviews.create(_review(alice.id))
    if state == "submitted":
        reviews.transition(created.id, "submitted")

    with pytest.raises(InvalidTransition):
        reviews.transition(created.id, state)


def test_transition_unknown_state_is_rejected(reviews, alice):
    created = reviews.create(_review(alice.id))
    with pytest.raises(InvalidTransition):
        reviews.transition(created.id, "archived")


def test_transition_blank_state_is_validation_error(reviews, alice):
    created = reviews.create(_review(alice.id))
    with pytest.raises(ValidationError) as exc_info:
        reviews.transition(created.id, "  ")
    assert exc_info.value.field == "state"


def test_transition_not_found(reviews):
    with pytest.raises(NotFound):
        reviews.transition(999, "submitted")


def test_transition_not_found_for_unknown_state(reviews):
    with pytest.raises(NotFound):
        reviews.transition(999, "archived")


def test_second_identical_transition_loses_the_race(reviews, alice):
    created = reviews.create(_review(alice.id))

    reviews.transition(created.id, "submitted")
    with pytest.raises(InvalidTransition) as exc_info:
        reviews.transition(created.id, "submitted")

    assert exc_info.value.from_state == "submitted"


@pytest.mark.parametrize(
    ("current", "requested", "expected"),
    [
        ("draft", "submitted", True),
        ("submitted", "approved", True),
        ("draft", "approved", False),
        ("approved", "submitted", False),
        ("submitted", "draft", False),
        ("draft", "draft", False),
        ("approved", "approved", False),
        ("draft", "bogus", False),
    ],
)
def test_is_valid_transition_table(current, requested, expected):
    assert is_valid_transition(current, requested) is expected


def test_list_orders_by_id_descending(reviews, alice, bob):
    r1 = reviews.create(_review(alice.id))
    r2 = reviews.create(_review(bob.id))
    r3 = reviews.create(_review(alice.id))

    result = reviews.list()

    assert [r.id for r in result] == [r3.id, r2.id, r1.id]
    assert {r.employee_name for r in result} == {"Alice", "Bob"}


def test_list_empty(reviews):
    assert reviews.list() == []
    assert reviews.list(ReviewFilter()) == []


def test_filter_conjunction_matches_exactly(reviews, alice, bob):
    # Overlapping partial matches: each decoy matches two of the three constraints.
    target = reviews.create(_review(alice.id, period="2024-Q4"))
    reviews.transition(target.id, "submitted")

    reviews.create(_review(alice.id, period="2024-Q4"))  # wrong state
    decoy_period = reviews.create(_review(alice.id, period="2024-Q3"))  # wrong period
    reviews.transition(decoy_period.id, "submitted")
    decoy_employee = reviews.create(_review(bob.id, period="2024-Q4"))  # wrong employee
    reviews.transition(decoy_employee.id, "submitted")

    result = reviews.list(ReviewFilter(employee_id=alice.id, period="2024-Q4", state="submitted"))

    assert [r.id for r in result] == [target.id]


def test_filter_single_constraints(reviews, alice, bob):
    reviews.create(_review(alice.id, period="2024-Q3"))
    reviews.create(_review(alice.id, period="2024-Q4"))
    reviews.create(_review(bob.id, period="2024-Q4"))

    assert len(reviews.list(ReviewFilter(employee_id=alice.id))) == 2
    assert len(reviews.list(ReviewFilter(period="2024-Q4"))) == 2
    assert len(reviews.list(ReviewFilter(state="draft"))) == 3
    assert reviews.list(ReviewFilter(state="approved")) == []


def test_aggregate_per_employee(reviews, alice, bob):
    reviews.create(_review(alice.id, rating=2))
    latest_alice = reviews.create(_review(alice.id, rating=5))
    reviews.transition(latest_alice.id, "submitted")
    reviews.create(_review(bob.id, rating=3))

    result = reviews.aggregate()

    assert [a.employee_id for a in result] == [alice.id, bob.id]
    alice_agg, bob_agg = result
    assert alice_agg.employee_name == "Alice"
    assert alice_agg.count == 2
    assert alice_agg.average_rating == pytest.approx(3.5)
    assert alice_agg.latest_state == ReviewState.SUBMITTED
    assert bob_agg.count == 1
    assert bob_agg.average_rating == pytest.approx(3.0)
    assert bob_agg.latest_state == ReviewState.DRAFT


def test_aggregate_excludes_employees_without_matching_reviews(reviews, employees, alice, bob):
    employees.create("Carol")  # no reviews at all
    reviews.create(_review(alice.id, period="2024-Q3"))
    reviews.create(_review(bob.id, period="2024-Q4"))

    result = reviews.aggregate(ReviewFilter(period="2024-Q4"))

    assert [a.employee_id for a in result] == [bob.id]


def test_aggregate_latest_state_uses_highest_matching_id(reviews, alice):
    older = reviews.create(_review(alice.id, period="2024-Q3", rating=4))
    reviews.transition(older.id, "submitted")
    reviews.transition(older.id, "approved")
    reviews.create(_review(alice.id, period="2024-Q4", rating=2))  # newest overall, but filtered out

    (agg,) = reviews.aggregate(ReviewFilter(period="2024-Q3"))

    assert agg.count == 1
    assert agg.average_rating == pytest.approx(4.0)
    assert agg.latest_state == ReviewState.APPROVED


def test_aggregate_empty(reviews):
    assert reviews.aggregate() == []


def test_review_ids_beyond_integer_range(reviews, alice):
    huge = 2**70

    with pytest.raises(ValidationError) as exc_info:
        reviews.list(ReviewFilter(employee_id=huge))
    assert exc_info.value.field == "employeeId"

    with pytest.raises(ValidationError):
        reviews.aggregate(ReviewFilter(employee_id=huge))
    with pytest.raises(ValidationError):
        reviews.create(_review(huge))
    with pytest.raises(ValidationError) as exc_info:
        reviews.transition(huge, "submitted")
    assert exc_info.value.field == "id"
    with pytest.raises(ValidationError):
        reviews.update(huge, PerformanceReviewUpdate(rating=3))


def test_failed_lookup_leaves_no_open_transaction(db_session, reviews):
    with pytest.raises(NotFound):
        reviews.create(_review(424242))
    assert not db_session.in_transaction()


def test_rejected_input_is_logged(reviews, alice, caplog):
    with caplog.at_level("INFO", logger="personnel"):
        with pytest.raises(ValidationError):
            reviews.create(_review(alice.id, rating=9))
    assert any("rating" in record.getMessage() for record in caplog.records)
