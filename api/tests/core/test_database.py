"""Tests for core.database.

- create_engine pool settings per backend
- get_db commit/rollback semantics
- create_tables / check_db_connection / missing_tables against in-memory SQLite
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine

from core.config import clear_settings_cache
from core.database import (
    check_db_connection,
    create_engine,
    create_tables,
    get_db,
    missing_tables,
)


def _request_with_session(session: AsyncMock) -> MagicMock:
    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    request = MagicMock()
    request.app.state.session_maker = MagicMock(return_value=session_cm)
    return request


@pytest.mark.unit
class TestGetDb:
    async def test_commits_on_success(self):
        session = AsyncMock()
        gen = get_db(_request_with_session(session))

        assert await gen.__anext__() is session
        with pytest.raises(StopAsyncIteration):
            await gen.__anext__()

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    async def test_rolls_back_and_reraises(self):
        session = AsyncMock()
        gen = get_db(_request_with_session(session))
        await gen.__anext__()

        with pytest.raises(ValueError, match="boom"):
            await gen.athrow(ValueError("boom"))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()

    async def test_rollback_failure_keeps_original_error(self):
        session = AsyncMock()
        session.rollback.side_effect = RuntimeError("rollback failed")
        gen = get_db(_request_with_session(session))
        await gen.__anext__()

        with pytest.raises(ValueError, match="boom"):
            await gen.athrow(ValueError("boom"))


@pytest.mark.unit
class TestCreateEngine:
    def test_postgres_gets_pool_settings(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db/products")
        monkeypatch.setenv("DB_POOL_SIZE", "7")
        clear_settings_cache()

        with patch("core.database.create_async_engine") as mock_create:
            create_engine()

        kwargs = mock_create.call_args.kwargs
        assert mock_create.call_args.args[0] == "postgresql+asyncpg://u:p@db/products"
        assert kwargs["pool_size"] == 7
        assert "statement_timeout" in kwargs["connect_args"]["server_settings"]

    def test_sqlite_skips_pool_settings(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite://")
        clear_settings_cache()

        with patch("core.database.create_async_engine") as mock_create:
            create_engine()

        kwargs = mock_create.call_args.kwargs
        assert "pool_size" not in kwargs
        assert "connect_args" not in kwargs


@pytest.mark.integration
class TestSchemaAndConnectivity:
    async def test_check_db_connection_succeeds(self, test_engine):
        await check_db_connection(test_engine)

    async def test_create_tables_is_idempotent(self, test_engine):
        await create_tables(test_engine)

        async with test_engine.connect() as conn:
            tables = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )

        assert "products" in tables

    async def test_missing_tables_empty_when_schema_exists(self, test_engine):
        assert await missing_tables(test_engine) == []

    async def test_missing_tables_lists_products_on_bare_database(self):
        engine = create_async_engine("sqlite+aiosqlite://")
        try:
            assert await missing_tables(engine) == ["products"]
        finally:
            await engine.dispose()
