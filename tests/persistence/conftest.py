"""SQLite-backed fixtures for the SQLAlchemy adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Registers the seat table on the shared metadata.
import booking_seats.adapters.sql  # noqa: F401
from booking_persistence_sqlalchemy import Base, SQLAlchemyOutboxStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'booking.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def sql_outbox_store(
    session_factory: async_sessionmaker[AsyncSession],
) -> SQLAlchemyOutboxStore:
    return SQLAlchemyOutboxStore(session_factory)
