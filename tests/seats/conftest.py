"""Seat service wired on the in-memory adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from booking_core.adapters.memory import (
    InMemoryOutboxStore,
    InMemoryUnitOfWork,
    in_memory_unit_of_work_factory,
)
from booking_seats import SeatReservation, build_mediator
from booking_seats.adapters import InMemorySeatRepository

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from booking_core.adapters.memory import InMemoryDatabase
    from booking_core.cqrs import Mediator


@pytest.fixture
def seat_repository(database: InMemoryDatabase) -> InMemorySeatRepository:
    return InMemorySeatRepository(database)


@pytest.fixture
def seat_outbox(database: InMemoryDatabase) -> InMemoryOutboxStore:
    return InMemoryOutboxStore(database)


@pytest.fixture
def mediator(
    database: InMemoryDatabase,
    seat_repository: InMemorySeatRepository,
    seat_outbox: InMemoryOutboxStore,
) -> Mediator:
    return build_mediator(
        repository=seat_repository,
        uow_factory=in_memory_unit_of_work_factory(database),
        outbox_store=seat_outbox,
    )


@pytest.fixture
def seed_seat(
    database: InMemoryDatabase, seat_repository: InMemorySeatRepository
) -> Callable[..., Awaitable[SeatReservation]]:
    """Store an available seat directly, bypassing the outbox."""

    async def _seed(flight_id: str = "FL100", seat_number: str = "12A") -> SeatReservation:
        seat = SeatReservation.create(flight_id, seat_number)
        seat.collect_events()
        async with InMemoryUnitOfWork(database) as uow:
            await seat_repository.add(seat, uow)
        return seat

    return _seed
