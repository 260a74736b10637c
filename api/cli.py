#!/usr/bin/env python3
"""CLI for Product Catalog API management tasks.

Usage:
    python -m cli <command>

Commands:
    create-tables  Create database tables from the SQLAlchemy models
    seed           Insert sample products
    list           Print every product
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal

from core.database import (
    create_engine,
    create_session_maker,
    create_tables,
    dispose_engine,
)
from models import Product
from repositories.product_repository import ProductRepository
from services.products_service import ProductService

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS: list[dict] = [
    {"name": "Pen", "description": "Blue ballpoint pen", "price": Decimal("1.50")},
    {"name": "Notebook", "description": "A5, 80 pages", "price": Decimal("4.20")},
    {"name": "Stapler", "description": None, "price": Decimal("9.99")},
]


async def _create_tables() -> None:
    engine = create_engine()
    try:
        await create_tables(engine)
    finally:
        await dispose_engine(engine)


async def _seed() -> list[Product]:
    engine = create_engine()
    session_maker = create_session_maker(engine)
    try:
        async with session_maker() as session:
            service = ProductService(ProductRepository(session))
            saved = [
                await service.save_product(Product(**fields))
                for fields in SAMPLE_PRODUCTS
            ]
            await session.commit()
        return saved
    finally:
        await dispose_engine(engine)


async def _list() -> list[Product]:
    engine = create_engine()
    session_maker = create_session_maker(engine)
    try:
        async with session_maker() as session:
            service = ProductService(ProductRepository(session))
            return await service.get_all_products()
    finally:
        await dispose_engine(engine)


def cmd_create_tables() -> int:
    """Create database tables from the SQLAlchemy models."""
    logger.info("cli.create_tables.started")
    asyncio.run(_create_tables())
    logger.info("cli.create_tables.complete")
    return 0


def cmd_seed() -> int:
    """Insert sample products."""
    saved = asyncio.run(_seed())
    logger.info("cli.seed.complete", extra={"count": len(saved)})
    return 0


def cmd_list() -> int:
    """Print every product, one per line."""
    products = asyncio.run(_list())
    for product in products:
        price = "-" if product.price is None else f"{product.price:.2f}"
        print(f"{product.id}\t{product.name}\t{price}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Product Catalog API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "create-tables",
        help="Create database tables from the SQLAlchemy models",
    )
    subparsers.add_parser("seed", help="Insert sample products")
    subparsers.add_parser("list", help="Print every product")

    args = parser.parse_args(argv)

    # stderr, so `list` output on stdout stays clean
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "create-tables":
        return cmd_create_tables()
    elif args.command == "seed":
        return cmd_seed()
    elif args.command == "list":
        return cmd_list()
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
