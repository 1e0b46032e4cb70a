"""Department business logic.

Name and code are unique. The service checks them before every insert and
before any update that changes them; the unique constraints in the schema
catch whatever slips between the check and the write.
"""

from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger, record_entity
from models import Department
from repositories import DepartmentRepository
from schemas import DepartmentRequest, DepartmentResponse
from services.exceptions import AlreadyExistsError, NotFoundError

logger = get_logger(__name__)


class DepartmentNotFoundError(NotFoundError):
    def __init__(self, field: str, value: object):
        super().__init__("Department", field, value)


class DepartmentAlreadyExistsError(AlreadyExistsError):
    def __init__(self, field: str, value: object):
        super().__init__("Department", field, value)


def _to_response(department: Department) -> DepartmentResponse:
    return DepartmentResponse.model_validate(department)


def _to_responses(departments: Iterable[Department]) -> list[DepartmentResponse]:
    return [_to_response(d) for d in departments]


async def _ensure_unique(
    repo: DepartmentRepository,
    data: DepartmentRequest,
    current: Department | None = None,
) -> None:
    if (current is None or data.name != current.name) and await repo.exists_by_name(
        data.name
    ):
        raise DepartmentAlreadyExistsError("name", data.name)
    if (current is None or data.code != current.code) and await repo.exists_by_code(
        data.code
    ):
        raise DepartmentAlreadyExistsError("code", data.code)


# PostgreSQL names the constraint, SQLite names the column
_CODE_CONSTRAINT_MARKERS = ("uq_departments_code", "departments.code")


def _constraint_violation(
    data: DepartmentRequest, err: IntegrityError
) -> DepartmentAlreadyExistsError:
    """Map a unique violation raised at flush time to the offending field.

    Decided by constraint or column name, never by the values the driver
    echoes back.
    """
    message = str(err.orig)
    if any(marker in message for marker in _CODE_CONSTRAINT_MARKERS):
        return DepartmentAlreadyExistsError("code", data.code)
    return DepartmentAlreadyExistsError("name", data.name)


async def create_department(
    db: AsyncSession, data: DepartmentRequest
) -> DepartmentResponse:
    """Create a department. New departments are active unless told otherwise.

    Raises:
        DepartmentAlreadyExistsError: name or code is taken.
    """
    repo = DepartmentRepository(db)
    await _ensure_unique(repo, data)

    try:
        department = await repo.create(
            name=data.name,
            code=data.code,
            description=data.description,
            manager_name=data.manager_name,
            manager_email=data.manager_email,
            location=data.location,
            budget=data.budget,
            is_active=True if data.is_active is None else data.is_active,
        )
    except IntegrityError as e:
        raise _constraint_violation(data, e) from e

    record_entity("department", department.id, action="created", code=department.code)
    logger.info(
        "department.created", department_id=department.id, code=department.code
    )
    return _to_response(department)


async def get_department(db: AsyncSession, department_id: int) -> DepartmentResponse:
    department = await DepartmentRepository(db).get_by_id(department_id)
    if department is None:
        raise DepartmentNotFoundError("id", department_id)
    return _to_response(department)


async def get_department_by_code(db: AsyncSession, code: str) -> DepartmentResponse:
    department = await DepartmentRepository(db).get_by_code(code)
    if department is None:
        raise DepartmentNotFoundError("code", code)
    return _to_response(department)


async def list_departments(db: AsyncSession) -> list[DepartmentResponse]:
    return _to_responses(await DepartmentRepository(db).list_all())


async def list_departments_by_location(
    db: AsyncSession, location: str
) -> list[DepartmentResponse]:
    return _to_responses(await DepartmentRepository(db).list_by_location(location))


async def list_departments_by_manager_email(
    db: AsyncSession, manager_email: str
) -> list[DepartmentResponse]:
    return _to_responses(
        await DepartmentRepository(db).list_by_manager_email(manager_email)
    )


async def list_active_departments(db: AsyncSession) -> list[DepartmentResponse]:
    return _to_responses(await DepartmentRepository(db).list_active())


async def search_departments(db: AsyncSession, name: str) -> list[DepartmentResponse]:
    return _to_responses(await DepartmentRepository(db).search_by_name(name))


async def count_active_departments(db: AsyncSession) -> int:
    return await DepartmentRepository(db).count_active()


async def update_department(
    db: AsyncSession, department_id: int, data: DepartmentRequest
) -> DepartmentResponse:
    """Replace every field of a department.

    Leaving is_active out keeps the stored flag.

    Raises:
        DepartmentNotFoundError: no department with this id.
        DepartmentAlreadyExistsError: the new name or code is taken.
    """
    repo = DepartmentRepository(db)
    department = await repo.get_by_id(department_id)
    if department is None:
        raise DepartmentNotFoundError("id", department_id)

    await _ensure_unique(repo, data, current=department)

    try:
        department = await repo.update(
            department,
            name=data.name,
            code=data.code,
            description=data.description,
            manager_name=data.manager_name,
            manager_email=data.manager_email,
            location=data.location,
            budget=data.budget,
            is_active=(
                department.is_active if data.is_active is None else data.is_active
            ),
        )
    except IntegrityError as e:
        raise _constraint_violation(data, e) from e

    record_entity("department", department.id, action="updated")
    logger.info("department.updated", department_id=department.id)
    return _to_response(department)


async def delete_department(db: AsyncSession, department_id: int) -> None:
    """Raises DepartmentNotFoundError when there is nothing to delete."""
    repo = DepartmentRepository(db)
    if not await repo.exists_by_id(department_id):
        raise DepartmentNotFoundError("id", department_id)
    await repo.delete_by_id(department_id)
    record_entity("department", department_id, action="deleted")
    logger.info("department.deleted", department_id=department_id)
