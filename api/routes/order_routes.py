"""Order endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status

from core.database import DbSession
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from models import OrderStatus
from schemas import OrderRequest, OrderResponse, OrderStatisticsResponse
from services.order_service import (
    OrderAlreadyExistsError,
    OrderNotFoundError,
    create_order,
    delete_order,
    get_order,
    get_order_by_order_number,
    get_order_statistics,
    list_orders,
    list_orders_by_customer_email,
    list_orders_by_customer_email_and_status,
    list_orders_by_status,
    list_orders_created_between,
    search_orders,
    update_order,
    update_order_status,
)

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])

NOT_FOUND = {404: {"description": "Order not found"}}
CONFLICT = {409: {"description": "Order number already exists"}}


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
@limiter.limit(WRITE_LIMIT)
async def create_order_endpoint(
    request: Request, body: OrderRequest, db: DbSession
) -> OrderResponse:
    """Create an order.

    orderNumber is generated when omitted and status defaults to PENDING.
    When orderItems is present, totalAmount is recomputed from the items.
    """
    try:
        return await create_order(db, body)
    except OrderAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=list[OrderResponse])
@limiter.limit(READ_LIMIT)
async def list_orders_endpoint(request: Request, db: DbSession) -> list[OrderResponse]:
    return await list_orders(db)


@router.get("/statistics", response_model=OrderStatisticsResponse)
@limiter.limit(READ_LIMIT)
async def get_order_statistics_endpoint(
    request: Request, db: DbSession
) -> OrderStatisticsResponse:
    return await get_order_statistics(db)


@router.get("/search", response_model=list[OrderResponse])
@limiter.limit(READ_LIMIT)
async def search_orders_endpoint(
    request: Request,
    customer_name: Annotated[str, Query(alias="customerName", min_length=1)],
    db: DbSession,
) -> list[OrderResponse]:
    """Case-insensitive substring search on customer name."""
    return await search_orders(db, customer_name)


@router.get("/date-range", response_model=list[OrderResponse])
@limiter.limit(READ_LIMIT)
async def list_orders_by_date_range_endpoint(
    request: Request,
    start_date: Annotated[datetime, Query(alias="startDate")],
    end_date: Annotated[datetime, Query(alias="endDate")],
    db: DbSession,
) -> list[OrderResponse]:
    """Orders created between startDate and endDate (inclusive, ISO-8601).

    Dates without an offset are read as UTC.
    """
    return await list_orders_created_between(db, start_date, end_date)


@router.get("/status/{order_status}", response_model=list[OrderResponse])
@limiter.limit(READ_LIMIT)
async def list_orders_by_status_endpoint(
    request: Request, order_status: OrderStatus, db: DbSession
) -> list[OrderResponse]:
    return await list_orders_by_status(db, order_status)


@router.get("/customer/{customer_email}", response_model=list[OrderResponse])
@limiter.limit(READ_LIMIT)
async def list_orders_by_customer_endpoint(
    request: Request, customer_email: str, db: DbSession
) -> list[OrderResponse]:
    return await list_orders_by_customer_email(db, customer_email)


@router.get(
    "/customer/{customer_email}/status/{order_status}",
    response_model=list[OrderResponse],
)
@limiter.limit(READ_LIMIT)
async def list_orders_by_customer_and_status_endpoint(
    request: Request,
    customer_email: str,
    order_status: OrderStatus,
    db: DbSession,
) -> list[OrderResponse]:
    return await list_orders_by_customer_email_and_status(
        db, customer_email, order_status
    )


@router.get(
    "/order-number/{order_number}",
    response_model=OrderResponse,
    responses=NOT_FOUND,
)
@limiter.limit(READ_LIMIT)
async def get_order_by_order_number_endpoint(
    request: Request, order_number: str, db: DbSession
) -> OrderResponse:
    try:
        return await get_order_by_order_number(db, order_number)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{order_id}", response_model=OrderResponse, responses=NOT_FOUND)
@limiter.limit(READ_LIMIT)
async def get_order_endpoint(
    request: Request, order_id: int, db: DbSession
) -> OrderResponse:
    try:
        return await get_order(db, order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{order_id}",
    response_model=OrderResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
@limiter.limit(WRITE_LIMIT)
async def update_order_endpoint(
    request: Request, order_id: int, body: OrderRequest, db: DbSession
) -> OrderResponse:
    """Replace an order. Items are replaced only when orderItems is present."""
    try:
        return await update_order(db, order_id, body)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except OrderAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderResponse, responses=NOT_FOUND)
@limiter.limit(WRITE_LIMIT)
async def update_order_status_endpoint(
    request: Request,
    order_id: int,
    order_status: Annotated[OrderStatus, Query(alias="status")],
    db: DbSession,
) -> OrderResponse:
    try:
        return await update_order_status(db, order_id, order_status)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/{order_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND
)
@limiter.limit(WRITE_LIMIT)
async def delete_order_endpoint(
    request: Request, order_id: int, db: DbSession
) -> None:
    """Delete an order together with its items."""
    try:
        await delete_order(db, order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
