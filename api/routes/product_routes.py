"""Product endpoints."""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status

from core.database import DbSession
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from schemas import ProductRequest, ProductResponse
from services.product_service import (
    ProductAlreadyExistsError,
    ProductNotFoundError,
    create_product,
    delete_product,
    get_product,
    get_product_by_sku,
    list_in_stock_products,
    list_products,
    list_products_by_category,
    list_products_by_price_range,
    search_products,
    update_product,
    update_product_quantity,
)

router = APIRouter(prefix="/api/v1/products", tags=["products"])

NOT_FOUND = {404: {"description": "Product not found"}}
CONFLICT = {409: {"description": "Product SKU already exists"}}


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
@limiter.limit(WRITE_LIMIT)
async def create_product_endpoint(
    request: Request, body: ProductRequest, db: DbSession
) -> ProductResponse:
    """Create a product. A SKU is generated when the body has none."""
    try:
        return await create_product(db, body)
    except ProductAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=list[ProductResponse])
@limiter.limit(READ_LIMIT)
async def list_products_endpoint(
    request: Request, db: DbSession
) -> list[ProductResponse]:
    return await list_products(db)


@router.get("/in-stock", response_model=list[ProductResponse])
@limiter.limit(READ_LIMIT)
async def list_in_stock_products_endpoint(
    request: Request, db: DbSession
) -> list[ProductResponse]:
    return await list_in_stock_products(db)


@router.get("/search", response_model=list[ProductResponse])
@limiter.limit(READ_LIMIT)
async def search_products_endpoint(
    request: Request, name: Annotated[str, Query(min_length=1)], db: DbSession
) -> list[ProductResponse]:
    return await search_products(db, name)


@router.get("/price-range", response_model=list[ProductResponse])
@limiter.limit(READ_LIMIT)
async def list_products_by_price_range_endpoint(
    request: Request,
    min_price: Annotated[Decimal, Query(alias="minPrice", ge=0)],
    max_price: Annotated[Decimal, Query(alias="maxPrice", ge=0)],
    db: DbSession,
) -> list[ProductResponse]:
    """Products priced between minPrice and maxPrice, both inclusive."""
    return await list_products_by_price_range(db, min_price, max_price)


@router.get("/category/{category}", response_model=list[ProductResponse])
@limiter.limit(READ_LIMIT)
async def list_products_by_category_endpoint(
    request: Request, category: str, db: DbSession
) -> list[ProductResponse]:
    return await list_products_by_category(db, category)


@router.get("/sku/{sku}", response_model=ProductResponse, responses=NOT_FOUND)
@limiter.limit(READ_LIMIT)
async def get_product_by_sku_endpoint(
    request: Request, sku: str, db: DbSession
) -> ProductResponse:
    try:
        return await get_product_by_sku(db, sku)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{product_id}", response_model=ProductResponse, responses=NOT_FOUND)
@limiter.limit(READ_LIMIT)
async def get_product_endpoint(
    request: Request, product_id: int, db: DbSession
) -> ProductResponse:
    try:
        return await get_product(db, product_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
@limiter.limit(WRITE_LIMIT)
async def update_product_endpoint(
    request: Request, product_id: int, body: ProductRequest, db: DbSession
) -> ProductResponse:
    """Replace a product, SKU included."""
    try:
        return await update_product(db, product_id, body)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ProductAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.patch(
    "/{product_id}/quantity", response_model=ProductResponse, responses=NOT_FOUND
)
@limiter.limit(WRITE_LIMIT)
async def update_product_quantity_endpoint(
    request: Request,
    product_id: int,
    quantity: Annotated[int, Query()],
    db: DbSession,
) -> ProductResponse:
    try:
        return await update_product_quantity(db, product_id, quantity)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/{product_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND
)
@limiter.limit(WRITE_LIMIT)
async def delete_product_endpoint(
    request: Request, product_id: int, db: DbSession
) -> None:
    try:
        await delete_product(db, product_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
