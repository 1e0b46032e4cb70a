"""API route modules."""

from .department_routes import router as department_router
from .employee_routes import router as employee_router
from .health_routes import router as health_router
from .order_routes import router as order_router
from .product_routes import router as product_router

__all__ = [
    "department_router",
    "employee_router",
    "health_router",
    "order_router",
    "product_router",
]
