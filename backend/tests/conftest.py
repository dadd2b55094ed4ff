from __future__ import annotations

import sys
from pathlib import Path
from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import app.models  # noqa: E402,F401
from app.core.config import Settings, get_settings  # noqa: E402
from app.models.base import Base  # noqa: E402
from app.services.memory_store import InMemoryRuleStore  # noqa: E402
from app.services.rule_store import SqlRuleStore  # noqa: E402


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Iterator[Settings]:
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.delenv("NUMBERING_DUPLICATE_CHECK", raising=False)
    monkeypatch.delenv("NUMBERING_GENERATION_TIMEOUT_SECONDS", raising=False)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    # Generous busy timeout: concurrency tests queue many writers on one SQLite file.
    engine = create_async_engine(settings.database_url, future=True, connect_args={"timeout": 30})

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def sql_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlRuleStore:
    return SqlRuleStore(session_factory)


@pytest.fixture
def memory_store() -> InMemoryRuleStore:
    return InMemoryRuleStore()
