"""Pydantic schemas for API request/response validation."""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models import Product


class ProductBase(BaseModel):
    """Fields a client may set on a product."""

    # Bounds mirror the products columns: String(255), Numeric(12, 2)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)


class ProductRequest(ProductBase):
    """Body for POST /api/products and PUT /api/products/{id}.

    ``id`` is optional: absent means insert, present means upsert under that id.
    PUT overrides it with the path id.
    """

    id: int | None = None

    def to_model(self, product_id: int | None = None) -> Product:
        """Build a transient Product carrying every field, so a save replaces."""
        return Product(
            id=product_id if product_id is not None else self.id,
            name=self.name,
            description=self.description,
            price=self.price,
        )


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        """SQLite drops the offset on read; stored values are always UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


class ReadinessResponse(HealthResponse):
    """Readiness response: database dialect and the tables that were checked."""

    database: str
    tables: list[str]
