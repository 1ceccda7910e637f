"""Shared fixtures: an in-memory database with its unit of work and outbox."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from booking_core.adapters.memory import (
    InMemoryDatabase,
    InMemoryOutboxStore,
    InMemoryUnitOfWork,
)
from booking_core.utils import utc_now

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from booking_core.ports.outbox import OutboxEntry


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or utc_now()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def outbox_store(database: InMemoryDatabase, clock: FakeClock) -> InMemoryOutboxStore:
    return InMemoryOutboxStore(database, clock=clock)


@pytest.fixture
def commit_entries(
    database: InMemoryDatabase, outbox_store: InMemoryOutboxStore
) -> Callable[..., Awaitable[None]]:
    """Append entries to the outbox in one unit of work and commit it."""

    async def _commit(*entries: OutboxEntry) -> None:
        async with InMemoryUnitOfWork(database) as uow:
            for entry in entries:
                await outbox_store.append(entry, uow)

    return _commit
