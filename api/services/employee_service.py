"""Employee business logic.

Email is the only unique field. department_id is taken at face value;
departments live in their own service and are never looked up from here.
"""

from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger, record_entity
from models import Employee
from repositories import EmployeeRepository
from schemas import EmployeeRequest, EmployeeResponse
from services.exceptions import AlreadyExistsError, NotFoundError

logger = get_logger(__name__)


class EmployeeNotFoundError(NotFoundError):
    def __init__(self, field: str, value: object):
        super().__init__("Employee", field, value)


class EmployeeAlreadyExistsError(AlreadyExistsError):
    def __init__(self, email: str):
        super().__init__("Employee", "email", email)


def _to_responses(employees: Iterable[Employee]) -> list[EmployeeResponse]:
    return [EmployeeResponse.model_validate(e) for e in employees]


async def create_employee(db: AsyncSession, data: EmployeeRequest) -> EmployeeResponse:
    """Create an employee. Active unless is_active says otherwise.

    Raises:
        EmployeeAlreadyExistsError: email is taken.
    """
    repo = EmployeeRepository(db)
    if await repo.exists_by_email(data.email):
        raise EmployeeAlreadyExistsError(data.email)

    try:
        employee = await repo.create(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone_number=data.phone_number,
            department_id=data.department_id,
            position=data.position,
            hire_date=data.hire_date,
            salary=data.salary,
            is_active=True if data.is_active is None else data.is_active,
        )
    except IntegrityError as e:
        raise EmployeeAlreadyExistsError(data.email) from e

    record_entity(
        "employee",
        employee.id,
        action="created",
        department_id=employee.department_id,
    )
    logger.info(
        "employee.created",
        employee_id=employee.id,
        department_id=employee.department_id,
    )
    return EmployeeResponse.model_validate(employee)


async def get_employee(db: AsyncSession, employee_id: int) -> EmployeeResponse:
    employee = await EmployeeRepository(db).get_by_id(employee_id)
    if employee is None:
        raise EmployeeNotFoundError("id", employee_id)
    return EmployeeResponse.model_validate(employee)


async def get_employee_by_email(db: AsyncSession, email: str) -> EmployeeResponse:
    employee = await EmployeeRepository(db).get_by_email(email)
    if employee is None:
        raise EmployeeNotFoundError("email", email)
    return EmployeeResponse.model_validate(employee)


async def list_employees(db: AsyncSession) -> list[EmployeeResponse]:
    return _to_responses(await EmployeeRepository(db).list_all())


async def list_employees_by_department(
    db: AsyncSession, department_id: int
) -> list[EmployeeResponse]:
    return _to_responses(
        await EmployeeRepository(db).list_by_department(department_id)
    )


async def list_active_employees(db: AsyncSession) -> list[EmployeeResponse]:
    return _to_responses(await EmployeeRepository(db).list_active())


async def list_employees_by_position(
    db: AsyncSession, position: str
) -> list[EmployeeResponse]:
    return _to_responses(await EmployeeRepository(db).list_by_position(position))


async def search_employees(db: AsyncSession, name: str) -> list[EmployeeResponse]:
    """Substring match against first or last name, ignoring case."""
    return _to_responses(await EmployeeRepository(db).search_by_name(name))


async def count_employees_in_department(db: AsyncSession, department_id: int) -> int:
    return await EmployeeRepository(db).count_by_department(department_id)


async def update_employee(
    db: AsyncSession, employee_id: int, data: EmployeeRequest
) -> EmployeeResponse:
    """Replace every field of an employee, hire date included.

    Leaving is_active out keeps the stored flag.

    Raises:
        EmployeeNotFoundError: no employee with this id.
        EmployeeAlreadyExistsError: the new email is taken.
    """
    repo = EmployeeRepository(db)
    employee = await repo.get_by_id(employee_id)
    if employee is None:
        raise EmployeeNotFoundError("id", employee_id)

    if data.email != employee.email and await repo.exists_by_email(data.email):
        raise EmployeeAlreadyExistsError(data.email)

    try:
        employee = await repo.update(
            employee,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone_number=data.phone_number,
            department_id=data.department_id,
            position=data.position,
            hire_date=data.hire_date,
            salary=data.salary,
            is_active=employee.is_active if data.is_active is None else data.is_active,
        )
    except IntegrityError as e:
        raise EmployeeAlreadyExistsError(data.email) from e

    record_entity("employee", employee.id, action="updated")
    logger.info("employee.updated", employee_id=employee.id)
    return EmployeeResponse.model_validate(employee)


async def delete_employee(db: AsyncSession, employee_id: int) -> None:
    repo = EmployeeRepository(db)
    if not await repo.exists_by_id(employee_id):
        raise EmployeeNotFoundError("id", employee_id)
    await repo.delete_by_id(employee_id)
    record_entity("employee", employee_id, action="deleted")
    logger.info("employee.deleted", employee_id=employee_id)
