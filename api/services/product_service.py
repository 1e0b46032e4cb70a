"""Product business logic.

SKU is optional and unique. A product created without one gets a generated
SKU-XXXXXXXX token; generated tokens are not checked for collisions, the
unique constraint rejects the rare clash.
"""

import uuid
from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger, record_entity
from models import Product
from repositories import ProductRepository
from schemas import ProductRequest, ProductResponse
from services.exceptions import AlreadyExistsError, NotFoundError

logger = get_logger(__name__)

SKU_PREFIX = "SKU-"


class ProductNotFoundError(NotFoundError):
    def __init__(self, field: str, value: object):
        super().__init__("Product", field, value)


class ProductAlreadyExistsError(AlreadyExistsError):
    def __init__(self, sku: str | None):
        super().__init__("Product", "sku", sku)


def generate_sku() -> str:
    """SKU- followed by 8 uppercase hex characters."""
    return SKU_PREFIX + uuid.uuid4().hex[:8].upper()


def _to_responses(products: Iterable[Product]) -> list[ProductResponse]:
    return [ProductResponse.model_validate(p) for p in products]


async def create_product(db: AsyncSession, data: ProductRequest) -> ProductResponse:
    """Create a product, generating a SKU when none is given.

    Raises:
        ProductAlreadyExistsError: the given SKU is taken.
    """
    repo = ProductRepository(db)
    if data.sku is not None and await repo.exists_by_sku(data.sku):
        raise ProductAlreadyExistsError(data.sku)

    sku = data.sku if data.sku is not None else generate_sku()
    try:
        product = await repo.create(
            name=data.name,
            description=data.description,
            price=data.price,
            quantity=data.quantity,
            category=data.category,
            sku=sku,
        )
    except IntegrityError as e:
        raise ProductAlreadyExistsError(sku) from e

    record_entity("product", product.id, action="created", sku=product.sku)
    logger.info("product.created", product_id=product.id, sku=product.sku)
    return ProductResponse.model_validate(product)


async def get_product(db: AsyncSession, product_id: int) -> ProductResponse:
    product = await ProductRepository(db).get_by_id(product_id)
    if product is None:
        raise ProductNotFoundError("id", product_id)
    return ProductResponse.model_validate(product)


async def get_product_by_sku(db: AsyncSession, sku: str) -> ProductResponse:
    product = await ProductRepository(db).get_by_sku(sku)
    if product is None:
        raise ProductNotFoundError("sku", sku)
    return ProductResponse.model_validate(product)


async def list_products(db: AsyncSession) -> list[ProductResponse]:
    return _to_responses(await ProductRepository(db).list_all())


async def list_products_by_category(
    db: AsyncSession, category: str
) -> list[ProductResponse]:
    return _to_responses(await ProductRepository(db).list_by_category(category))


async def list_in_stock_products(db: AsyncSession) -> list[ProductResponse]:
    return _to_responses(await ProductRepository(db).list_in_stock())


async def search_products(db: AsyncSession, name: str) -> list[ProductResponse]:
    return _to_responses(await ProductRepository(db).search_by_name(name))


async def list_products_by_price_range(
    db: AsyncSession, min_price: Decimal, max_price: Decimal
) -> list[ProductResponse]:
    """Inclusive range. A reversed range matches nothing."""
    return _to_responses(
        await ProductRepository(db).list_by_price_range(min_price, max_price)
    )


async def update_product(
    db: AsyncSession, product_id: int, data: ProductRequest
) -> ProductResponse:
    """Replace every field of a product.

    The SKU is overwritten too, so leaving it out clears it.

    Raises:
        ProductNotFoundError: no product with this id.
        ProductAlreadyExistsError: the new SKU is taken.
    """
    repo = ProductRepository(db)
    product = await repo.get_by_id(product_id)
    if product is None:
        raise ProductNotFoundError("id", product_id)

    if (
        data.sku is not None
        and data.sku != product.sku
        and await repo.exists_by_sku(data.sku)
    ):
        raise ProductAlreadyExistsError(data.sku)

    try:
        product = await repo.update(
            product,
            name=data.name,
            description=data.description,
            price=data.price,
            quantity=data.quantity,
            category=data.category,
            sku=data.sku,
        )
    except IntegrityError as e:
        raise ProductAlreadyExistsError(data.sku) from e

    record_entity("product", product.id, action="updated", sku=product.sku)
    logger.info("product.updated", product_id=product.id)
    return ProductResponse.model_validate(product)


async def update_product_quantity(
    db: AsyncSession, product_id: int, quantity: int
) -> ProductResponse:
    repo = ProductRepository(db)
    product = await repo.get_by_id(product_id)
    if product is None:
        raise ProductNotFoundError("id", product_id)

    product = await repo.update_quantity(product, quantity)
    record_entity("product", product.id, action="quantity_updated", quantity=quantity)
    logger.info("product.quantity.updated", product_id=product.id, quantity=quantity)
    return ProductResponse.model_validate(product)


async def delete_product(db: AsyncSession, product_id: int) -> None:
    repo = ProductRepository(db)
    if not await repo.exists_by_id(product_id):
        raise ProductNotFoundError("id", product_id)
    await repo.delete_by_id(product_id)
    record_entity("product", product_id, action="deleted")
    logger.info("product.deleted", product_id=product_id)
