"""Product repository for database operations."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Product
from repositories.utils import log_slow_query


class ProductRepository:
    """Repository for Product database operations.

    Does not commit; the caller (get_db) owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("product_find_all")
    async def find_all(self) -> list[Product]:
        """Get every product, ordered by id."""
        result = await self.db.execute(select(Product).order_by(Product.id))
        return list(result.scalars().all())

    @log_slow_query("product_find_by_id")
    async def find_by_id(self, product_id: int) -> Product | None:
        """Get a product by ID. Returns None when it doesn't exist."""
        result = await self.db.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    @log_slow_query("product_save")
    async def save(self, product: Product) -> Product:
        """Insert or update a product.

        - No id: inserted, id assigned by the database.
        - Id of a stored product: that row is overwritten with the given fields.
        - Id not stored: inserted as a new row with a database-assigned id,
          so explicit ids never collide with the identity sequence.

        Returns the persistent instance, refreshed after flush.
        """
        existing = None
        if product.id is not None:
            existing = await self.db.get(Product, product.id)

        if existing is None:
            product.id = None
            self.db.add(product)
            target = product
        else:
            target = await self.db.merge(product)

        await self.db.flush()
        await self.db.refresh(target)
        return target

    @log_slow_query("product_delete_by_id")
    async def delete_by_id(self, product_id: int) -> None:
        """Delete a product by ID. A missing ID deletes nothing."""
        await self.db.execute(delete(Product).where(Product.id == product_id))
