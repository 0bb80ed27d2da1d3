from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from personnel.db.session import get_db
from personnel.repositories import EmployeeRepository
from personnel.schemas.hr import EmployeeIn, EmployeeOut

router = APIRouter(tags=["employees"])


def get_employee_repository(db: Session = Depends(get_db)) -> EmployeeRepository:
    return EmployeeRepository(db)


@router.get("/employees", response_model=list[EmployeeOut])
def list_employees(repo: EmployeeRepository = Depends(get_employee_repository)) -> list[EmployeeOut]:
    return repo.list()


@router.post("/employees", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(payload: EmployeeIn, repo: EmployeeRepository = Depends(get_employee_repository)) -> EmployeeOut:
    return repo.create(payload.name)


@router.put("/employees/{id}", response_model=EmployeeOut)
def update_employee(
    id: int,
    payload: EmployeeIn,
    repo: EmployeeRepository = Depends(get_employee_repository),
) -> EmployeeOut:
    return repo.update(id, payload.name)


@router.delete("/employees/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(id: int, repo: EmployeeRepository = Depends(get_employee_repository)) -> Response:
    repo.delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
