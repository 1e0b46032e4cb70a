"""Department endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status

from core.database import DbSession
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from schemas import DepartmentRequest, DepartmentResponse
from services.department_service import (
    DepartmentAlreadyExistsError,
    DepartmentNotFoundError,
    count_active_departments,
    create_department,
    delete_department,
    get_department,
    get_department_by_code,
    list_active_departments,
    list_departments,
    list_departments_by_location,
    list_departments_by_manager_email,
    search_departments,
    update_department,
)

router = APIRouter(prefix="/api/v1/departments", tags=["departments"])

NOT_FOUND = {404: {"description": "Department not found"}}
CONFLICT = {409: {"description": "Department name or code already exists"}}


@router.post(
    "",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
@limiter.limit(WRITE_LIMIT)
async def create_department_endpoint(
    request: Request, body: DepartmentRequest, db: DbSession
) -> DepartmentResponse:
    try:
        return await create_department(db, body)
    except DepartmentAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=list[DepartmentResponse])
@limiter.limit(READ_LIMIT)
async def list_departments_endpoint(
    request: Request, db: DbSession
) -> list[DepartmentResponse]:
    return await list_departments(db)


@router.get("/active", response_model=list[DepartmentResponse])
@limiter.limit(READ_LIMIT)
async def list_active_departments_endpoint(
    request: Request, db: DbSession
) -> list[DepartmentResponse]:
    return await list_active_departments(db)


@router.get("/active/count", response_model=int)
@limiter.limit(READ_LIMIT)
async def count_active_departments_endpoint(request: Request, db: DbSession) -> int:
    return await count_active_departments(db)


@router.get("/search", response_model=list[DepartmentResponse])
@limiter.limit(READ_LIMIT)
async def search_departments_endpoint(
    request: Request, name: Annotated[str, Query(min_length=1)], db: DbSession
) -> list[DepartmentResponse]:
    """Case-insensitive substring search on department name."""
    return await search_departments(db, name)


@router.get("/location/{location}", response_model=list[DepartmentResponse])
@limiter.limit(READ_LIMIT)
async def list_departments_by_location_endpoint(
    request: Request, location: str, db: DbSession
) -> list[DepartmentResponse]:
    return await list_departments_by_location(db, location)


@router.get("/manager/{manager_email}", response_model=list[DepartmentResponse])
@limiter.limit(READ_LIMIT)
async def list_departments_by_manager_endpoint(
    request: Request, manager_email: str, db: DbSession
) -> list[DepartmentResponse]:
    return await list_departments_by_manager_email(db, manager_email)


@router.get("/code/{code}", response_model=DepartmentResponse, responses=NOT_FOUND)
@limiter.limit(READ_LIMIT)
async def get_department_by_code_endpoint(
    request: Request, code: str, db: DbSession
) -> DepartmentResponse:
    try:
        return await get_department_by_code(db, code)
    except DepartmentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/{department_id}", response_model=DepartmentResponse, responses=NOT_FOUND
)
@limiter.limit(READ_LIMIT)
async def get_department_endpoint(
    request: Request, department_id: int, db: DbSession
) -> DepartmentResponse:
    try:
        return await get_department(db, department_id)
    except DepartmentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{department_id}",
    response_model=DepartmentResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
@limiter.limit(WRITE_LIMIT)
async def update_department_endpoint(
    request: Request, department_id: int, body: DepartmentRequest, db: DbSession
) -> DepartmentResponse:
    """Replace a department. Omitting isActive keeps the current flag."""
    try:
        return await update_department(db, department_id, body)
    except DepartmentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DepartmentAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/{department_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND
)
@limiter.limit(WRITE_LIMIT)
async def delete_department_endpoint(
    request: Request, department_id: int, db: DbSession
) -> None:
    try:
        await delete_department(db, department_id)
    except DepartmentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
