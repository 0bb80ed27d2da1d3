from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy import bindparam
from sqlalchemy.sql.elements import ColumnElement

from personnel.models.hr import PayrollRecord, PerformanceReview


class UnsafeClauseError(RuntimeError):
    """A clause was requested that is not in the statically declared allow-list."""


@dataclass(frozen=True)
class ClauseTemplate:
    """One allow-listed (column, operator) pair."""

    column: ColumnElement[Any]
    compare: Callable[[Any, Any], ColumnElement[bool]] = operator.eq


# Closed tables: the only predicates and assignments that can ever reach a statement.
REVIEW_FILTERS: Mapping[str, ClauseTemplate] = {
    "employee_id": ClauseTemplate(PerformanceReview.employee_id),
    "period": ClauseTemplate(PerformanceReview.period),
    "state": ClauseTemplate(PerformanceReview.state),
}

PAYROLL_FILTERS: Mapping[str, ClauseTemplate] = {
    "employee_id": ClauseTemplate(PayrollRecord.employee_id),
    "period": ClauseTemplate(PayrollRecord.period),
}

REVIEW_UPDATABLE_COLUMNS: frozenset[str] = frozenset({"reviewer", "rating", "strengths", "opportunities"})


@dataclass(frozen=True)
class BuiltFilter:
    """
    Predicates plus their positionally matched values.

    `params[i]` is the value bound into `clauses[i]`. An empty filter yields two
    empty tuples and `where(*clauses)` is then a no-op.
    """

    clauses: tuple[ColumnElement[bool], ...] = ()
    params: tuple[Any, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.clauses)


@dataclass
class FilterBuilder:
    """
    Compose an equality conjunction from optional constraints.

    Values are always bound (`bindparam`), and the column side comes exclusively
    from `allowed`. Asking for a key outside `allowed` is a programming error and
    raises `UnsafeClauseError` immediately.
    """

    allowed: Mapping[str, ClauseTemplate]
    _clauses: list[ColumnElement[bool]] = field(default_factory=list)
    _params: list[Any] = field(default_factory=list)

    def add(self, key: str, value: Any) -> FilterBuilder:
        template = self.allowed.get(key)
        if template is None:
            raise UnsafeClauseError(f"filter {key!r} is not allow-listed")

        if _is_absent(value):
            return self

        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, str):
            value = value.strip()

        self._clauses.append(template.compare(template.column, bindparam(None, value, unique=True)))
        self._params.append(value)
        return self

    def extend(self, constraints: Mapping[str, Any]) -> FilterBuilder:
        for key, value in constraints.items():
            self.add(key, value)
        return self

    def build(self) -> BuiltFilter:
        return BuiltFilter(clauses=tuple(self._clauses), params=tuple(self._params))


def build_filter(allowed: Mapping[str, ClauseTemplate], constraints: Mapping[str, Any]) -> BuiltFilter:
    return FilterBuilder(allowed).extend(constraints).build()


def build_assignments(allowed: Iterable[str], values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Restrict an UPDATE's SET list to allow-listed column names.

    None values are dropped (field not supplied); any other unknown key raises.
    """

    allowed_set = frozenset(allowed)
    assignments: dict[str, Any] = {}
    for key, value in values.items():
        if key not in allowed_set:
            raise UnsafeClauseError(f"column {key!r} is not updatable")
        if value is None:
            continue
        assignments[key] = value
    return assignments


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False
