from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from personnel.exceptions import StorageFailure, ValidationError

logger = logging.getLogger(__name__)

# Largest value a SQLite INTEGER (signed 64-bit) can hold.
MAX_ID = 2**63 - 1


class Repository:
    """Shared plumbing: a session and a guard that turns engine errors into StorageFailure."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _unit_of_work(self, operation: str) -> Iterator[Session]:
        """
        Run one bounded operation against the store.

        Whatever escapes rolls the session back first. SQLAlchemy errors surface
        as StorageFailure chained to the cause; an id the driver cannot bind
        becomes a ValidationError; domain failures propagate unchanged.
        """

        try:
            yield self.db
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Storage failure during %s", operation, exc_info=True)
            raise StorageFailure(operation, exc) from exc
        except OverflowError as exc:
            self.db.rollback()
            raise reject("id", "is out of range") from exc
        except Exception:
            self.db.rollback()
            raise


def reject(field: str, rule: str) -> ValidationError:
    logger.info("Rejected input: %s %s", field, rule)
    return ValidationError(field, rule)


def require_text(field: str, value: str | None) -> str:
    """Trim `value`; reject it when nothing is left."""

    trimmed = (value or "").strip()
    if not trimmed:
        raise reject(field, "is required")
    return trimmed


def require_id(field: str, value: int | None) -> int:
    if value is None or value <= 0:
        raise reject(field, "is required")
    return check_id_range(field, value)


def check_id_range(field: str, value: int | None) -> int | None:
    if value is not None and not -MAX_ID - 1 <= value <= MAX_ID:
        raise reject(field, "is out of range")
    return value


def require_finite(field: str, value: float) -> float:
    if not math.isfinite(value):
        raise reject(field, "must be a finite number")
    return value


def require_non_negative(field: str, value: float) -> float:
    require_finite(field, value)
    if value < 0:
        raise reject(field, "must be >= 0")
    return value
