"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping services focused on
business rules and routes focused on HTTP handling. They flush but never
commit; the request's unit of work (core.database.get_db) owns the
transaction.
"""

from repositories.department_repository import DepartmentRepository
from repositories.employee_repository import EmployeeRepository
from repositories.order_repository import OrderItemData, OrderRepository
from repositories.product_repository import ProductRepository
from repositories.utils import log_slow_query

__all__ = [
    "DepartmentRepository",
    "EmployeeRepository",
    "OrderItemData",
    "OrderRepository",
    "ProductRepository",
    "log_slow_query",
]
