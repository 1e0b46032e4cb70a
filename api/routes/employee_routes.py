"""Employee endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status

from core.database import DbSession
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from schemas import EmployeeRequest, EmployeeResponse
from services.employee_service import (
    EmployeeAlreadyExistsError,
    EmployeeNotFoundError,
    count_employees_in_department,
    create_employee,
    delete_employee,
    get_employee,
    get_employee_by_email,
    list_active_employees,
    list_employees,
    list_employees_by_department,
    list_employees_by_position,
    search_employees,
    update_employee,
)

router = APIRouter(prefix="/api/v1/employees", tags=["employees"])

NOT_FOUND = {404: {"description": "Employee not found"}}
CONFLICT = {409: {"description": "Employee email already exists"}}


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
@limiter.limit(WRITE_LIMIT)
async def create_employee_endpoint(
    request: Request, body: EmployeeRequest, db: DbSession
) -> EmployeeResponse:
    try:
        return await create_employee(db, body)
    except EmployeeAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=list[EmployeeResponse])
@limiter.limit(READ_LIMIT)
async def list_employees_endpoint(
    request: Request, db: DbSession
) -> list[EmployeeResponse]:
    return await list_employees(db)


@router.get("/active", response_model=list[EmployeeResponse])
@limiter.limit(READ_LIMIT)
async def list_active_employees_endpoint(
    request: Request, db: DbSession
) -> list[EmployeeResponse]:
    return await list_active_employees(db)


@router.get("/search", response_model=list[EmployeeResponse])
@limiter.limit(READ_LIMIT)
async def search_employees_endpoint(
    request: Request, name: Annotated[str, Query(min_length=1)], db: DbSession
) -> list[EmployeeResponse]:
    """Case-insensitive substring search on first or last name."""
    return await search_employees(db, name)


@router.get("/position/{position}", response_model=list[EmployeeResponse])
@limiter.limit(READ_LIMIT)
async def list_employees_by_position_endpoint(
    request: Request, position: str, db: DbSession
) -> list[EmployeeResponse]:
    return await list_employees_by_position(db, position)


@router.get("/department/{department_id}", response_model=list[EmployeeResponse])
@limiter.limit(READ_LIMIT)
async def list_employees_by_department_endpoint(
    request: Request, department_id: int, db: DbSession
) -> list[EmployeeResponse]:
    return await list_employees_by_department(db, department_id)


@router.get("/department/{department_id}/count", response_model=int)
@limiter.limit(READ_LIMIT)
async def count_employees_in_department_endpoint(
    request: Request, department_id: int, db: DbSession
) -> int:
    return await count_employees_in_department(db, department_id)


@router.get("/email/{email}", response_model=EmployeeResponse, responses=NOT_FOUND)
@limiter.limit(READ_LIMIT)
async def get_employee_by_email_endpoint(
    request: Request, email: str, db: DbSession
) -> EmployeeResponse:
    try:
        return await get_employee_by_email(db, email)
    except EmployeeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{employee_id}", response_model=EmployeeResponse, responses=NOT_FOUND)
@limiter.limit(READ_LIMIT)
async def get_employee_endpoint(
    request: Request, employee_id: int, db: DbSession
) -> EmployeeResponse:
    try:
        return await get_employee(db, employee_id)
    except EmployeeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
@limiter.limit(WRITE_LIMIT)
async def update_employee_endpoint(
    request: Request, employee_id: int, body: EmployeeRequest, db: DbSession
) -> EmployeeResponse:
    """Replace an employee. Omitting isActive keeps the current flag."""
    try:
        return await update_employee(db, employee_id, body)
    except EmployeeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except EmployeeAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/{employee_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND
)
@limiter.limit(WRITE_LIMIT)
async def delete_employee_endpoint(
    request: Request, employee_id: int, db: DbSession
) -> None:
    try:
        await delete_employee(db, employee_id)
    except EmployeeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
