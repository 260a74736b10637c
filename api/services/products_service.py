"""Product service: CRUD facade over ProductRepository."""

from typing import Annotated

from fastapi import Depends

from core.database import DbSession
from models import Product
from repositories.product_repository import ProductRepository


class ProductService:
    """Forwards product reads and writes to the repository.

    Adds no rules of its own: no validation, no caching, no error
    translation. Repository exceptions reach the caller unchanged.
    """

    def __init__(self, repository: ProductRepository) -> None:
        self._repository = repository

    @property
    def repository(self) -> ProductRepository:
        return self._repository

    async def get_all_products(self) -> list[Product]:
        return await self._repository.find_all()

    async def get_product_by_id(self, product_id: int) -> Product | None:
        """Absence is a normal outcome and returns None."""
        return await self._repository.find_by_id(product_id)

    async def save_product(self, product: Product) -> Product:
        """Insert (no id) or update (stored id); returns the persisted product."""
        return await self._repository.save(product)

    async def delete_by_id(self, product_id: int) -> None:
        await self._repository.delete_by_id(product_id)


def get_product_service(db: DbSession) -> ProductService:
    """Request-scoped ProductService bound to the request session."""
    return ProductService(ProductRepository(db))


ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
