"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping services and routes
free of SQL. They never commit; the request session dependency does.
"""

from repositories.product_repository import ProductRepository
from repositories.utils import log_slow_query

__all__ = [
    "ProductRepository",
    "log_slow_query",
]
