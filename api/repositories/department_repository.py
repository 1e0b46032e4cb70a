"""Department repository for database operations."""

from collections.abc import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Department, utcnow
from repositories.utils import log_slow_query, row_exists


class DepartmentRepository:
    """Repository for Department database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("department.create")
    async def create(
        self,
        *,
        name: str,
        code: str,
        description: str | None,
        manager_name: str | None,
        manager_email: str | None,
        location: str | None,
        budget: float | None,
        is_active: bool,
    ) -> Department:
        """Insert a department. Calls flush() but does NOT commit."""
        now = utcnow()
        department = Department(
            name=name,
            code=code,
            description=description,
            manager_name=manager_name,
            manager_email=manager_email,
            location=location,
            budget=budget,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        self.db.add(department)
        await self.db.flush()
        return department

    @log_slow_query("department.get_by_id")
    async def get_by_id(self, department_id: int) -> Department | None:
        return await self.db.get(Department, department_id)

    @log_slow_query("department.get_by_code")
    async def get_by_code(self, code: str) -> Department | None:
        result = await self.db.execute(
            select(Department).where(Department.code == code)
        )
        return result.scalar_one_or_none()

    @log_slow_query("department.list_all")
    async def list_all(self) -> Sequence[Department]:
        result = await self.db.execute(select(Department).order_by(Department.id))
        return result.scalars().all()

    @log_slow_query("department.list_by_location")
    async def list_by_location(self, location: str) -> Sequence[Department]:
        result = await self.db.execute(
            select(Department)
            .where(Department.location == location)
            .order_by(Department.id)
        )
        return result.scalars().all()

    @log_slow_query("department.list_by_manager_email")
    async def list_by_manager_email(self, manager_email: str) -> Sequence[Department]:
        result = await self.db.execute(
            select(Department)
            .where(Department.manager_email == manager_email)
            .order_by(Department.id)
        )
        return result.scalars().all()

    @log_slow_query("department.list_active")
    async def list_active(self) -> Sequence[Department]:
        result = await self.db.execute(
            select(Department)
            .where(Department.is_active.is_(True))
            .order_by(Department.id)
        )
        return result.scalars().all()

    @log_slow_query("department.search_by_name")
    async def search_by_name(self, term: str) -> Sequence[Department]:
        """Case-insensitive substring match on name. LIKE wildcards are escaped."""
        result = await self.db.execute(
            select(Department)
            .where(Department.name.icontains(term, autoescape=True))
            .order_by(Department.id)
        )
        return result.scalars().all()

    @log_slow_query("department.count_active")
    async def count_active(self) -> int:
        result = await self.db.execute(
            select(func.count(Department.id)).where(Department.is_active.is_(True))
        )
        return result.scalar_one()

    async def exists_by_id(self, department_id: int) -> bool:
        return await row_exists(self.db, Department.id == department_id)

    async def exists_by_name(self, name: str) -> bool:
        return await row_exists(self.db, Department.name == name)

    async def exists_by_code(self, code: str) -> bool:
        return await row_exists(self.db, Department.code == code)

    @log_slow_query("department.update")
    async def update(
        self,
        department: Department,
        *,
        name: str,
        code: str,
        description: str | None,
        manager_name: str | None,
        manager_email: str | None,
        location: str | None,
        budget: float | None,
        is_active: bool,
    ) -> Department:
        """Overwrite every mutable field and stamp updated_at."""
        department.name = name
        department.code = code
        department.description = description
        department.manager_name = manager_name
        department.manager_email = manager_email
        department.location = location
        department.budget = budget
        department.is_active = is_active
        department.updated_at = utcnow()
        await self.db.flush()
        return department

    @log_slow_query("department.delete_by_id")
    async def delete_by_id(self, department_id: int) -> bool:
        """Delete by primary key. Returns False when no row matched."""
        result = await self.db.execute(
            delete(Department).where(Department.id == department_id)
        )
        return result.rowcount > 0
