"""
Tests for the session dependency and table setup. The engine and session
maker are replaced with mocks; no database is contacted.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core import database
from app.core.database import Base, dispose_engine, get_db, init_db


def mock_session_maker(session):
    context = MagicMock()
    context.__aenter__.return_value = session
    context.__aexit__.return_value = False
    return MagicMock(return_value=context)


def mock_engine():
    conn = MagicMock()
    conn.run_sync = AsyncMock()
    context = MagicMock()
    context.__aenter__.return_value = conn
    context.__aexit__.return_value = False
    engine = MagicMock()
    engine.begin.return_value = context
    engine.dispose = AsyncMock()
    return engine, conn


@pytest.fixture
def session(monkeypatch):
    session = MagicMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    monkeypatch.setattr(database, "_async_session_maker", mock_session_maker(session))
    return session


@pytest.mark.asyncio
class TestGetDb:

    async def test_session_closed_after_request(self, session):
        dependency = get_db()

        assert await dependency.__anext__() is session
        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()

        session.rollback.assert_not_awaited()
        session.close.assert_awaited_once()

    async def test_failed_request_rolls_back(self, session):
        dependency = get_db()
        await dependency.__anext__()

        with pytest.raises(ValueError):
            await dependency.athrow(ValueError("verification failed"))

        session.rollback.assert_awaited_once()
        session.close.assert_awaited_once()


@pytest.mark.asyncio
class TestInitDb:

    async def test_creates_creator_tables(self, monkeypatch):
        engine, conn = mock_engine()
        monkeypatch.setattr(database, "_engine", engine)

        tables = await init_db()

        assert tables == ["creator_analytics_history", "social_accounts", "users"]
        conn.run_sync.assert_awaited_once_with(Base.metadata.create_all)

    async def test_dispose_resets_engine(self, monkeypatch):
        engine, _ = mock_engine()
        monkeypatch.setattr(database, "_engine", engine)
        monkeypatch.setattr(database, "_async_session_maker", MagicMock())

        await dispose_engine()

        engine.dispose.assert_awaited_once()
        assert database._engine is None
        assert database._async_session_maker is None

    async def test_dispose_without_engine(self, monkeypatch):
        monkeypatch.setattr(database, "_engine", None)

        await dispose_engine()

        assert database._engine is None
