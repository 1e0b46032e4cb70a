"""Product repository for database operations."""

from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Product, utcnow
from repositories.utils import log_slow_query, row_exists


class ProductRepository:
    """Repository for Product database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("product.create")
    async def create(
        self,
        *,
        name: str,
        description: str | None,
        price: Decimal,
        quantity: int,
        category: str | None,
        sku: str | None,
    ) -> Product:
        """Insert a product. Calls flush() but does NOT commit."""
        now = utcnow()
        product = Product(
            name=name,
            description=description,
            price=price,
            quantity=quantity,
            category=category,
            sku=sku,
            created_at=now,
            updated_at=now,
        )
        self.db.add(product)
        await self.db.flush()
        return product

    @log_slow_query("product.get_by_id")
    async def get_by_id(self, product_id: int) -> Product | None:
        return await self.db.get(Product, product_id)

    @log_slow_query("product.get_by_sku")
    async def get_by_sku(self, sku: str) -> Product | None:
        result = await self.db.execute(select(Product).where(Product.sku == sku))
        return result.scalar_one_or_none()

    @log_slow_query("product.list_all")
    async def list_all(self) -> Sequence[Product]:
        result = await self.db.execute(select(Product).order_by(Product.id))
        return result.scalars().all()

    @log_slow_query("product.list_by_category")
    async def list_by_category(self, category: str) -> Sequence[Product]:
        result = await self.db.execute(
            select(Product).where(Product.category == category).order_by(Product.id)
        )
        return result.scalars().all()

    @log_slow_query("product.list_in_stock")
    async def list_in_stock(self) -> Sequence[Product]:
        """Products with quantity above zero."""
        result = await self.db.execute(
            select(Product).where(Product.quantity > 0).order_by(Product.id)
        )
        return result.scalars().all()

    @log_slow_query("product.list_by_price_range")
    async def list_by_price_range(
        self, min_price: Decimal, max_price: Decimal
    ) -> Sequence[Product]:
        """Inclusive on both ends."""
        result = await self.db.execute(
            select(Product)
            .where(Product.price.between(min_price, max_price))
            .order_by(Product.price, Product.id)
        )
        return result.scalars().all()

    @log_slow_query("product.search_by_name")
    async def search_by_name(self, term: str) -> Sequence[Product]:
        """Case-insensitive substring match on name."""
        result = await self.db.execute(
            select(Product)
            .where(Product.name.icontains(term, autoescape=True))
            .order_by(Product.id)
        )
        return result.scalars().all()

    async def exists_by_id(self, product_id: int) -> bool:
        return await row_exists(self.db, Product.id == product_id)

    async def exists_by_sku(self, sku: str) -> bool:
        return await row_exists(self.db, Product.sku == sku)

    @log_slow_query("product.update")
    async def update(
        self,
        product: Product,
        *,
        name: str,
        description: str | None,
        price: Decimal,
        quantity: int,
        category: str | None,
        sku: str | None,
    ) -> Product:
        """Overwrite every mutable field, sku included, and stamp updated_at."""
        product.name = name
        product.description = description
        product.price = price
        product.quantity = quantity
        product.category = category
        product.sku = sku
        product.updated_at = utcnow()
        await self.db.flush()
        return product

    @log_slow_query("product.update_quantity")
    async def update_quantity(self, product: Product, quantity: int) -> Product:
        product.quantity = quantity
        product.updated_at = utcnow()
        await self.db.flush()
        return product

    @log_slow_query("product.delete_by_id")
    async def delete_by_id(self, product_id: int) -> bool:
        """Delete by primary key. Returns False when no row matched."""
        result = await self.db.execute(delete(Product).where(Product.id == product_id))
        return result.rowcount > 0
