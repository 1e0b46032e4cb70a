"""Employee repository for database operations."""

from collections.abc import Sequence
from datetime import date

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Employee, utcnow
from repositories.utils import log_slow_query, row_exists


class EmployeeRepository:
    """Repository for Employee database operations.

    department_id is stored by value; nothing here checks that the
    department exists.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("employee.create")
    async def create(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        department_id: int,
        position: str,
        hire_date: date,
        salary: float | None,
        is_active: bool,
    ) -> Employee:
        """Insert an employee. Calls flush() but does NOT commit."""
        now = utcnow()
        employee = Employee(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=phone_number,
            department_id=department_id,
            position=position,
            hire_date=hire_date,
            salary=salary,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        self.db.add(employee)
        await self.db.flush()
        return employee

    @log_slow_query("employee.get_by_id")
    async def get_by_id(self, employee_id: int) -> Employee | None:
        return await self.db.get(Employee, employee_id)

    @log_slow_query("employee.get_by_email")
    async def get_by_email(self, email: str) -> Employee | None:
        result = await self.db.execute(select(Employee).where(Employee.email == email))
        return result.scalar_one_or_none()

    @log_slow_query("employee.list_all")
    async def list_all(self) -> Sequence[Employee]:
        result = await self.db.execute(select(Employee).order_by(Employee.id))
        return result.scalars().all()

    @log_slow_query("employee.list_by_department")
    async def list_by_department(self, department_id: int) -> Sequence[Employee]:
        result = await self.db.execute(
            select(Employee)
            .where(Employee.department_id == department_id)
            .order_by(Employee.id)
        )
        return result.scalars().all()

    @log_slow_query("employee.list_active")
    async def list_active(self) -> Sequence[Employee]:
        result = await self.db.execute(
            select(Employee).where(Employee.is_active.is_(True)).order_by(Employee.id)
        )
        return result.scalars().all()

    @log_slow_query("employee.list_by_position")
    async def list_by_position(self, position: str) -> Sequence[Employee]:
        result = await self.db.execute(
            select(Employee)
            .where(Employee.position == position)
            .order_by(Employee.id)
        )
        return result.scalars().all()

    @log_slow_query("employee.search_by_name")
    async def search_by_name(self, term: str) -> Sequence[Employee]:
        """Case-insensitive substring match on first or last name."""
        result = await self.db.execute(
            select(Employee)
            .where(
                or_(
                    Employee.first_name.icontains(term, autoescape=True),
                    Employee.last_name.icontains(term, autoescape=True),
                )
            )
            .order_by(Employee.id)
        )
        return result.scalars().all()

    @log_slow_query("employee.count_by_department")
    async def count_by_department(self, department_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Employee.id)).where(
                Employee.department_id == department_id
            )
        )
        return result.scalar_one()

    async def exists_by_id(self, employee_id: int) -> bool:
        return await row_exists(self.db, Employee.id == employee_id)

    async def exists_by_email(self, email: str) -> bool:
        return await row_exists(self.db, Employee.email == email)

    @log_slow_query("employee.update")
    async def update(
        self,
        employee: Employee,
        *,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        department_id: int,
        position: str,
        hire_date: date,
        salary: float | None,
        is_active: bool,
    ) -> Employee:
        """Overwrite every mutable field and stamp updated_at."""
        employee.first_name = first_name
        employee.last_name = last_name
        employee.email = email
        employee.phone_number = phone_number
        employee.department_id = department_id
        employee.position = position
        employee.hire_date = hire_date
        employee.salary = salary
        employee.is_active = is_active
        employee.updated_at = utcnow()
        await self.db.flush()
        return employee

    @log_slow_query("employee.delete_by_id")
    async def delete_by_id(self, employee_id: int) -> bool:
        """Delete by primary key. Returns False when no row matched."""
        result = await self.db.execute(
            delete(Employee).where(Employee.id == employee_id)
        )
        return result.rowcount > 0
