"""API route modules."""

from .health_routes import router as health_router
from .products_routes import router as products_router

__all__ = [
    "health_router",
    "products_router",
]
