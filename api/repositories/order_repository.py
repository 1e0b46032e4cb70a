"""Order repository for database operations.

Order items are only ever read and written through their owning order.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Order, OrderItem, OrderStatus, as_utc, utcnow
from repositories.utils import log_slow_query, row_exists


class OrderItemData(NamedTuple):
    """Values for one order line, total already computed."""

    product_id: int
    product_name: str | None
    quantity: int
    unit_price: Decimal
    total_price: Decimal


def _build_items(items: Iterable[OrderItemData]) -> list[OrderItem]:
    return [OrderItem(**item._asdict()) for item in items]


class OrderRepository:
    """Repository for Order database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("order.create")
    async def create(
        self,
        *,
        order_number: str,
        customer_name: str,
        customer_email: str,
        total_amount: Decimal,
        status: OrderStatus,
        shipping_address: str | None,
        items: Iterable[OrderItemData] = (),
    ) -> Order:
        """Insert an order with its items. Calls flush() but does NOT commit."""
        now = utcnow()
        order = Order(
            order_number=order_number,
            customer_name=customer_name,
            customer_email=customer_email,
            total_amount=total_amount,
            status=status,
            shipping_address=shipping_address,
            created_at=now,
            updated_at=now,
            order_items=_build_items(items),
        )
        self.db.add(order)
        await self.db.flush()
        return order

    @log_slow_query("order.get_by_id")
    async def get_by_id(self, order_id: int) -> Order | None:
        return await self.db.get(Order, order_id)

    @log_slow_query("order.get_by_order_number")
    async def get_by_order_number(self, order_number: str) -> Order | None:
        result = await self.db.execute(
            select(Order).where(Order.order_number == order_number)
        )
        return result.scalar_one_or_none()

    @log_slow_query("order.list_all")
    async def list_all(self) -> Sequence[Order]:
        result = await self.db.execute(select(Order).order_by(Order.id))
        return result.scalars().all()

    @log_slow_query("order.list_by_status")
    async def list_by_status(self, status: OrderStatus) -> Sequence[Order]:
        result = await self.db.execute(
            select(Order).where(Order.status == status).order_by(Order.id)
        )
        return result.scalars().all()

    @log_slow_query("order.list_by_customer_email")
    async def list_by_customer_email(self, customer_email: str) -> Sequence[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.customer_email == customer_email)
            .order_by(Order.id)
        )
        return result.scalars().all()

    @log_slow_query("order.list_by_customer_email_and_status")
    async def list_by_customer_email_and_status(
        self, customer_email: str, status: OrderStatus
    ) -> Sequence[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.customer_email == customer_email, Order.status == status)
            .order_by(Order.id)
        )
        return result.scalars().all()

    @log_slow_query("order.list_created_between")
    async def list_created_between(
        self, start: datetime, end: datetime
    ) -> Sequence[Order]:
        """Orders with created_at in [start, end]. Naive bounds are read as UTC."""
        result = await self.db.execute(
            select(Order)
            .where(Order.created_at.between(as_utc(start), as_utc(end)))
            .order_by(Order.created_at, Order.id)
        )
        return result.scalars().all()

    @log_slow_query("order.search_by_customer_name")
    async def search_by_customer_name(self, term: str) -> Sequence[Order]:
        """Case-insensitive substring match on customer name."""
        result = await self.db.execute(
            select(Order)
            .where(Order.customer_name.icontains(term, autoescape=True))
            .order_by(Order.id)
        )
        return result.scalars().all()

    async def exists_by_id(self, order_id: int) -> bool:
        return await row_exists(self.db, Order.id == order_id)

    async def exists_by_order_number(self, order_number: str) -> bool:
        return await row_exists(self.db, Order.order_number == order_number)

    @log_slow_query("order.count_all")
    async def count_all(self) -> int:
        result = await self.db.execute(select(func.count(Order.id)))
        return result.scalar_one()

    @log_slow_query("order.count_by_status")
    async def count_by_status(self, status: OrderStatus) -> int:
        result = await self.db.execute(
            select(func.count(Order.id)).where(Order.status == status)
        )
        return result.scalar_one()

    @log_slow_query("order.update")
    async def update(
        self,
        order: Order,
        *,
        order_number: str,
        customer_name: str,
        customer_email: str,
        total_amount: Decimal,
        status: OrderStatus,
        shipping_address: str | None,
        items: Iterable[OrderItemData] | None = None,
    ) -> Order:
        """Overwrite every mutable field and stamp updated_at.

        items=None keeps the existing lines; any other value replaces them
        (orphaned lines are deleted on flush).
        """
        order.order_number = order_number
        order.customer_name = customer_name
        order.customer_email = customer_email
        order.total_amount = total_amount
        order.status = status
        order.shipping_address = shipping_address
        if items is not None:
            order.order_items = _build_items(items)
        order.updated_at = utcnow()
        await self.db.flush()
        return order

    @log_slow_query("order.update_status")
    async def update_status(self, order: Order, status: OrderStatus) -> Order:
        order.status = status
        order.updated_at = utcnow()
        await self.db.flush()
        return order

    @log_slow_query("order.delete_by_id")
    async def delete_by_id(self, order_id: int) -> bool:
        """Delete by primary key. Items go with it via ON DELETE CASCADE."""
        result = await self.db.execute(delete(Order).where(Order.id == order_id))
        return result.rowcount > 0
