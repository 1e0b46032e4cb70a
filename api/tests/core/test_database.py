"""Tests for core database module."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import NullPool, QueuePool

from core.config import clear_settings_cache
from core.database import (
    PoolStatus,
    check_db_connection,
    comprehensive_health_check,
    create_engine,
    dispose_engine,
    get_db,
    get_pool_status,
)

pytestmark = pytest.mark.unit


class TestPoolStatus:
    def test_creates_named_tuple(self):
        status = PoolStatus(pool_size=5, checked_out=2, overflow=1, checked_in=3)

        assert status._asdict() == {
            "pool_size": 5,
            "checked_out": 2,
            "overflow": 1,
            "checked_in": 3,
        }


class TestCreateEngine:
    async def test_sqlite_engine_has_no_pool(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        clear_settings_cache()

        engine = create_engine()
        try:
            assert isinstance(engine.sync_engine.pool, NullPool)
            assert get_pool_status(engine) is None
        finally:
            await engine.dispose()

    async def test_sqlite_engine_enforces_foreign_keys(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        clear_settings_cache()

        engine = create_engine()
        try:
            async with engine.connect() as conn:
                result = await conn.execute(text("PRAGMA foreign_keys"))
                assert result.scalar() == 1
        finally:
            await engine.dispose()

    async def test_postgres_engine_is_pooled(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@localhost/db")
        monkeypatch.setenv("DB_POOL_SIZE", "7")
        clear_settings_cache()

        engine = create_engine()
        try:
            assert isinstance(engine.sync_engine.pool, QueuePool)
            status = get_pool_status(engine)
            assert status is not None
            assert status.pool_size == 7
            assert status.checked_out == 0
        finally:
            await engine.dispose()


class TestHealthChecks:
    async def test_check_db_connection_against_sqlite(self, test_engine: AsyncEngine):
        await check_db_connection(test_engine)

    async def test_comprehensive_health_check_success(self, test_engine: AsyncEngine):
        result = await comprehensive_health_check(test_engine)

        assert result == {"database": True, "pool": None}

    async def test_comprehensive_health_check_failure(self):
        engine = MagicMock()

        with patch(
            "core.database.check_db_connection",
            side_effect=ConnectionError("refused"),
        ):
            result = await comprehensive_health_check(engine)

        assert result["database"] is False

    async def test_dispose_engine(self):
        engine = MagicMock()
        engine.dispose = AsyncMock()

        await dispose_engine(engine)

        engine.dispose.assert_awaited_once()


class TestGetDb:
    def _request(self, session) -> MagicMock:
        session_cm = MagicMock()
        session_cm.__aenter__ = AsyncMock(return_value=session)
        session_cm.__aexit__ = AsyncMock(return_value=False)
        request = MagicMock()
        request.app.state.session_maker = MagicMock(return_value=session_cm)
        return request

    async def test_commits_on_success(self):
        session = AsyncMock()
        gen = get_db(self._request(session))

        assert await gen.__anext__() is session
        with pytest.raises(StopAsyncIteration):
            await gen.__anext__()

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    async def test_rolls_back_on_error(self):
        session = AsyncMock()
        gen = get_db(self._request(session))
        await gen.__anext__()

        with pytest.raises(ValueError, match="boom"):
            await gen.athrow(ValueError("boom"))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()
