"""
Typed failures raised by the repositories.

Callers discriminate by type (or by `code`) and read the structured fields,
never by parsing messages:

    PersonnelError
    +-- ValidationError    field + rule that was violated        (422)
    +-- NotFound           entity + id that does not exist       (404)
    +-- InvalidTransition  from_state -> to_state not permitted  (422)
    +-- StorageFailure     engine/connection error, opaque       (500)
"""

from __future__ import annotations

from typing import Any


class PersonnelError(Exception):
    code: str = "PERSONNEL_ERROR"
    http_status: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class ValidationError(PersonnelError):
    code = "VALIDATION_ERROR"
    http_status = 422

    def __init__(self, field: str, rule: str):
        self.field = field
        self.rule = rule
        super().__init__(f"{field} {rule}")

    def to_response(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, "field": self.field, "rule": self.rule}


class NotFound(PersonnelError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entity: str, id: int):
        self.entity = entity
        self.id = id
        super().__init__(f"{entity} {id} not found")

    def to_response(self) -> dict[str, Any]:
        return {"error": "not found", "code": self.code, "entity": self.entity, "id": self.id}


class InvalidTransition(PersonnelError):
    code = "INVALID_TRANSITION"
    http_status = 422

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"invalid transition: {from_state} -> {to_state}")

    def to_response(self) -> dict[str, Any]:
        return {"error": "invalid transition", "code": self.code, "from": self.from_state, "to": self.to_state}


class StorageFailure(PersonnelError):
    """Wraps an engine error. The cause stays on the exception (and in logs), never in responses."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"storage failure during {operation}")

    def to_response(self) -> dict[str, Any]:
        return {"error": "internal error", "code": self.code}
