"""Order business logic.

This module handles:
- Order number uniqueness and ORD-XXXXXXXX generation
- Item line totals and the order total derived from them
- Full replace updates, narrow status updates
- Per-status statistics

Every write runs inside the request's unit of work, so an order, its items
and its timestamps commit together or not at all.
"""

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger, record_entity
from models import Order, OrderStatus
from repositories import OrderItemData, OrderRepository
from schemas import (
    OrderItemRequest,
    OrderRequest,
    OrderResponse,
    OrderStatisticsResponse,
)
from services.exceptions import AlreadyExistsError, NotFoundError

logger = get_logger(__name__)

ORDER_NUMBER_PREFIX = "ORD-"


class OrderNotFoundError(NotFoundError):
    def __init__(self, field: str, value: object):
        super().__init__("Order", field, value)


class OrderAlreadyExistsError(AlreadyExistsError):
    def __init__(self, order_number: str):
        super().__init__("Order", "order number", order_number)


def generate_order_number() -> str:
    """ORD- followed by 8 uppercase hex characters."""
    return ORDER_NUMBER_PREFIX + uuid.uuid4().hex[:8].upper()


def to_item_data(item: OrderItemRequest) -> OrderItemData:
    """Fill in the line total when the caller left it out."""
    total_price = item.total_price
    if total_price is None:
        total_price = item.unit_price * item.quantity
    return OrderItemData(
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity,
        unit_price=item.unit_price,
        total_price=total_price,
    )


def calculate_order_total(items: Iterable[OrderItemData]) -> Decimal:
    """Sum of line totals. No lines sum to zero."""
    return sum((item.total_price for item in items), Decimal("0"))


def _resolve_items(
    data: OrderRequest,
) -> tuple[Sequence[OrderItemData] | None, Decimal]:
    """Items to write and the total to store.

    When items are given the total is derived from them, otherwise the
    caller's total stands.
    """
    if data.order_items is None:
        return None, data.total_amount
    items = [to_item_data(item) for item in data.order_items]
    return items, calculate_order_total(items)


def _to_responses(orders: Iterable[Order]) -> list[OrderResponse]:
    return [OrderResponse.model_validate(o) for o in orders]


async def create_order(db: AsyncSession, data: OrderRequest) -> OrderResponse:
    """Create an order with its items.

    Status defaults to PENDING and a missing order number is generated.

    Raises:
        OrderAlreadyExistsError: the given order number is taken.
    """
    repo = OrderRepository(db)
    if data.order_number is not None and await repo.exists_by_order_number(
        data.order_number
    ):
        raise OrderAlreadyExistsError(data.order_number)

    order_number = data.order_number or generate_order_number()
    items, total_amount = _resolve_items(data)

    try:
        order = await repo.create(
            order_number=order_number,
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            total_amount=total_amount,
            status=data.status or OrderStatus.PENDING,
            shipping_address=data.shipping_address,
            items=items or (),
        )
    except IntegrityError as e:
        raise OrderAlreadyExistsError(order_number) from e

    record_entity(
        "order",
        order.id,
        action="created",
        order_number=order.order_number,
        item_count=len(order.order_items),
    )
    logger.info(
        "order.created",
        order_id=order.id,
        order_number=order.order_number,
        total_amount=str(order.total_amount),
    )
    return OrderResponse.model_validate(order)


async def get_order(db: AsyncSession, order_id: int) -> OrderResponse:
    order = await OrderRepository(db).get_by_id(order_id)
    if order is None:
        raise OrderNotFoundError("id", order_id)
    return OrderResponse.model_validate(order)


async def get_order_by_order_number(
    db: AsyncSession, order_number: str
) -> OrderResponse:
    order = await OrderRepository(db).get_by_order_number(order_number)
    if order is None:
        raise OrderNotFoundError("order number", order_number)
    return OrderResponse.model_validate(order)


async def list_orders(db: AsyncSession) -> list[OrderResponse]:
    return _to_responses(await OrderRepository(db).list_all())


async def list_orders_by_customer_email(
    db: AsyncSession, customer_email: str
) -> list[OrderResponse]:
    return _to_responses(
        await OrderRepository(db).list_by_customer_email(customer_email)
    )


async def list_orders_by_status(
    db: AsyncSession, status: OrderStatus
) -> list[OrderResponse]:
    return _to_responses(await OrderRepository(db).list_by_status(status))


async def list_orders_by_customer_email_and_status(
    db: AsyncSession, customer_email: str, status: OrderStatus
) -> list[OrderResponse]:
    return _to_responses(
        await OrderRepository(db).list_by_customer_email_and_status(
            customer_email, status
        )
    )


async def list_orders_created_between(
    db: AsyncSession, start: datetime, end: datetime
) -> list[OrderResponse]:
    return _to_responses(await OrderRepository(db).list_created_between(start, end))


async def search_orders(db: AsyncSession, customer_name: str) -> list[OrderResponse]:
    return _to_responses(
        await OrderRepository(db).search_by_customer_name(customer_name)
    )


async def update_order(
    db: AsyncSession, order_id: int, data: OrderRequest
) -> OrderResponse:
    """Replace every field of an order.

    A missing order number or status keeps the stored one. Items are
    replaced only when the request carries a list.

    Raises:
        OrderNotFoundError: no order with this id.
        OrderAlreadyExistsError: the new order number is taken.
    """
    repo = OrderRepository(db)
    order = await repo.get_by_id(order_id)
    if order is None:
        raise OrderNotFoundError("id", order_id)

    order_number = data.order_number or order.order_number
    if order_number != order.order_number and await repo.exists_by_order_number(
        order_number
    ):
        raise OrderAlreadyExistsError(order_number)

    items, total_amount = _resolve_items(data)

    try:
        order = await repo.update(
            order,
            order_number=order_number,
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            total_amount=total_amount,
            status=data.status or order.status,
            shipping_address=data.shipping_address,
            items=items,
        )
    except IntegrityError as e:
        raise OrderAlreadyExistsError(order_number) from e

    record_entity("order", order.id, action="updated")
    logger.info("order.updated", order_id=order.id)
    return OrderResponse.model_validate(order)


async def update_order_status(
    db: AsyncSession, order_id: int, status: OrderStatus
) -> OrderResponse:
    """Change only the status (and updated_at)."""
    repo = OrderRepository(db)
    order = await repo.get_by_id(order_id)
    if order is None:
        raise OrderNotFoundError("id", order_id)

    previous = order.status
    order = await repo.update_status(order, status)
    record_entity("order", order.id, action="status_updated", status=status.value)
    logger.info(
        "order.status.updated",
        order_id=order.id,
        from_status=previous.value,
        to_status=status.value,
    )
    return OrderResponse.model_validate(order)


async def delete_order(db: AsyncSession, order_id: int) -> None:
    """Delete an order and its items."""
    repo = OrderRepository(db)
    if not await repo.exists_by_id(order_id):
        raise OrderNotFoundError("id", order_id)
    await repo.delete_by_id(order_id)
    record_entity("order", order_id, action="deleted")
    logger.info("order.deleted", order_id=order_id)


async def get_order_statistics(db: AsyncSession) -> OrderStatisticsResponse:
    """Overall and per-status counts, one query each."""
    repo = OrderRepository(db)
    return OrderStatisticsResponse(
        total_orders=await repo.count_all(),
        pending_orders=await repo.count_by_status(OrderStatus.PENDING),
        confirmed_orders=await repo.count_by_status(OrderStatus.CONFIRMED),
        shipped_orders=await repo.count_by_status(OrderStatus.SHIPPED),
        delivered_orders=await repo.count_by_status(OrderStatus.DELIVERED),
        cancelled_orders=await repo.count_by_status(OrderStatus.CANCELLED),
    )
