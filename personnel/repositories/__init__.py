"""
Repository layer: one class per entity, each bound to a SQLAlchemy Session.

Every operation is a single bounded unit of work and either returns a value
model from personnel.schemas.hr or raises one of personnel.exceptions.
"""

from .employees import EmployeeRepository
from .payroll import PayrollRepository
from .reviews import ReviewRepository

__all__ = [
    "EmployeeRepository",
    "PayrollRepository",
    "ReviewRepository",
]
