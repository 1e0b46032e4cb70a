"""Tests for product_service against the SQLite test database."""

import re
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from schemas import ProductRequest
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

pytestmark = pytest.mark.integration

SKU_PATTERN = re.compile(r"^SKU-[A-Z0-9]{8}$")


def _request(**overrides) -> ProductRequest:
    fields = {
        "name": "Widget",
        "description": "A small widget",
        "price": Decimal("9.99"),
        "quantity": 100,
        "category": "Tools",
    }
    fields.update(overrides)
    return ProductRequest(**fields)


class TestCreateProduct:
    async def test_generates_sku_when_missing(self, db_session: AsyncSession):
        created = await create_product(db_session, _request())

        assert created.sku is not None
        assert SKU_PATTERN.match(created.sku)
        assert created.price == Decimal("9.99")

    async def test_keeps_given_sku(self, db_session: AsyncSession):
        created = await create_product(db_session, _request(sku="WID-001"))

        assert created.sku == "WID-001"
        assert (await get_product_by_sku(db_session, "WID-001")).id == created.id

    async def test_duplicate_sku_rejected(self, db_session: AsyncSession):
        await create_product(db_session, _request(sku="WID-001"))

        with pytest.raises(ProductAlreadyExistsError) as exc_info:
            await create_product(db_session, _request(name="Other", sku="WID-001"))

        assert str(exc_info.value) == "Product already exists with sku: WID-001"
        assert len(await list_products(db_session)) == 1


class TestProductQueries:
    async def test_get_missing_raises(self, db_session: AsyncSession):
        with pytest.raises(ProductNotFoundError, match="Product not found with id: 3"):
            await get_product(db_session, 3)

    async def test_get_by_unknown_sku_raises(self, db_session: AsyncSession):
        with pytest.raises(ProductNotFoundError, match="with sku: NOPE"):
            await get_product_by_sku(db_session, "NOPE")

    async def test_filters(self, db_session: AsyncSession):
        widget = await create_product(db_session, _request())
        gizmo = await create_product(
            db_session,
            _request(name="Gizmo", price=Decimal("25.00"), quantity=0, category="Toys"),
        )

        in_range = await list_products_by_price_range(
            db_session, Decimal("5"), Decimal("10")
        )

        assert [p.id for p in in_range] == [widget.id]
        assert [p.id for p in await list_in_stock_products(db_session)] == [widget.id]
        assert [p.id for p in await list_products_by_category(db_session, "Toys")] == [
            gizmo.id
        ]
        assert [p.id for p in await search_products(db_session, "GIZ")] == [gizmo.id]


class TestUpdateProduct:
    async def test_full_replace_clears_sku(self, db_session: AsyncSession):
        created = await create_product(db_session, _request(sku="WID-001"))

        updated = await update_product(
            db_session, created.id, _request(price=Decimal("12.50"))
        )

        assert updated.price == Decimal("12.50")
        assert updated.sku is None

    async def test_sku_taken_by_another_product(self, db_session: AsyncSession):
        await create_product(db_session, _request(sku="WID-001"))
        other = await create_product(db_session, _request(sku="WID-002"))

        with pytest.raises(ProductAlreadyExistsError):
            await update_product(db_session, other.id, _request(sku="WID-001"))

        assert (await get_product(db_session, other.id)).sku == "WID-002"

    async def test_update_quantity(self, db_session: AsyncSession):
        created = await create_product(db_session, _request())

        updated = await update_product_quantity(db_session, created.id, 7)

        assert updated.quantity == 7
        assert updated.name == "Widget"

    async def test_update_quantity_missing(self, db_session: AsyncSession):
        with pytest.raises(ProductNotFoundError):
            await update_product_quantity(db_session, 77, 1)


class TestDeleteProduct:
    async def test_delete_then_delete_again(self, db_session: AsyncSession):
        created = await create_product(db_session, _request())

        await delete_product(db_session, created.id)

        with pytest.raises(ProductNotFoundError):
            await delete_product(db_session, created.id)
