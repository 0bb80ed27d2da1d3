from __future__ import annotations

import logging

from sqlalchemy import delete, select

from personnel.exceptions import NotFound
from personnel.models.hr import Employee
from personnel.repositories.base import Repository, require_text
from personnel.schemas.hr import EmployeeOut

logger = logging.getLogger(__name__)


class EmployeeRepository(Repository):
    def list(self) -> list[EmployeeOut]:
        with self._unit_of_work("list employees") as db:
            rows = db.scalars(select(Employee).order_by(Employee.id)).all()
            return [EmployeeOut.model_validate(row) for row in rows]

    def get(self, id: int) -> EmployeeOut:
        with self._unit_of_work("get employee") as db:
            employee = db.get(Employee, id)
            if employee is None:
                raise NotFound("employee", id)
            return EmployeeOut.model_validate(employee)

    def create(self, name: str) -> EmployeeOut:
        name = require_text("name", name)
        with self._unit_of_work("create employee") as db:
            employee = Employee(name=name)
            db.add(employee)
            db.commit()
            logger.info("Created employee id=%s", employee.id)
            return EmployeeOut.model_validate(employee)

    def update(self, id: int, name: str) -> EmployeeOut:
        name = require_text("name", name)
        with self._unit_of_work("update employee") as db:
            employee = db.get(Employee, id)
            if employee is None:
                raise NotFound("employee", id)
            employee.name = name
            db.commit()
            logger.info("Updated employee id=%s", id)
            return EmployeeOut.model_validate(employee)

    def delete(self, id: int) -> None:
        """Remove the employee; the store cascades to its reviews and payroll records."""

        with self._unit_of_work("delete employee") as db:
            result = db.execute(delete(Employee).where(Employee.id == id))
            if result.rowcount == 0:
                raise NotFound("employee", id)
            db.commit()
            logger.info("Deleted employee id=%s (reviews and payroll cascaded)", id)
