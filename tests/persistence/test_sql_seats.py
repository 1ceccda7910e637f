"""Seat service on SQLAlchemy: version-conditional writes and the outbox."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from booking_core.primitives.exceptions import ConcurrencyConflictError
from booking_persistence_sqlalchemy import (
    SQLAlchemyOutboxStore,
    SQLAlchemyUnitOfWork,
    sqlalchemy_unit_of_work_factory,
)
from booking_seats import (
    CreateSeat,
    GetAvailableSeats,
    GetSeat,
    ReserveSeat,
    SeatReservation,
    SeatStatus,
    build_mediator,
)
from booking_seats.adapters.sql import SQLAlchemySeatRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@pytest.fixture
def seat_repository(
    session_factory: async_sessionmaker[AsyncSession],
) -> SQLAlchemySeatRepository:
    return SQLAlchemySeatRepository(session_factory)


@pytest.mark.asyncio
async def test_stale_aggregate_write_is_a_conflict(
    session_factory: async_sessionmaker[AsyncSession],
    seat_repository: SQLAlchemySeatRepository,
) -> None:
    seat = SeatReservation.create("FL100", "12A")
    async with SQLAlchemyUnitOfWork(session_factory=session_factory) as uow:
        await seat_repository.add(seat, uow)

    first = await seat_repository.get("FL100/12A")
    second = await seat_repository.get("FL100/12A")
    assert first is not None
    assert second is not None

    async with SQLAlchemyUnitOfWork(session_factory=session_factory) as uow:
        first.reserve(expected_version=0, passenger_id="p1")
        await seat_repository.save(first, uow)

    second.reserve(expected_version=0, passenger_id="p2")
    with pytest.raises(ConcurrencyConflictError):
        async with SQLAlchemyUnitOfWork(session_factory=session_factory) as uow:
            await seat_repository.save(second, uow)

    stored = await seat_repository.get("FL100/12A")
    assert stored is not None
    assert stored.reserved_by == "p1"
    assert stored.version == 1
    assert stored.status is SeatStatus.RESERVED


@pytest.mark.asyncio
async def test_duplicate_insert_is_a_conflict(
    session_factory: async_sessionmaker[AsyncSession],
    seat_repository: SQLAlchemySeatRepository,
) -> None:
    async with SQLAlchemyUnitOfWork(session_factory=session_factory) as uow:
        await seat_repository.add(SeatReservation.create("FL100", "12A"), uow)

    with pytest.raises(ConcurrencyConflictError):
        async with SQLAlchemyUnitOfWork(session_factory=session_factory) as uow:
            await seat_repository.add(SeatReservation.create("FL100", "12A"), uow)


@pytest.mark.asyncio
async def test_mediator_writes_seat_and_outbox_in_one_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    seat_repository: SQLAlchemySeatRepository,
    sql_outbox_store: SQLAlchemyOutboxStore,
) -> None:
    mediator = build_mediator(
        repository=seat_repository,
        uow_factory=sqlalchemy_unit_of_work_factory(session_factory),
        outbox_store=sql_outbox_store,
    )

    await mediator.send(CreateSeat(flight_id="FL100", seat_number="12A"))
    await mediator.send(CreateSeat(flight_id="FL100", seat_number="3C"))
    reserved = await mediator.send(
        ReserveSeat(
            flight_id="FL100", seat_number="12A", expected_version=0, passenger_id="p1"
        )
    )

    assert reserved.result == 1
    view = (await mediator.send(GetSeat(flight_id="FL100", seat_number="12A"))).result
    assert view is not None
    assert (view.status, view.version) == (SeatStatus.RESERVED, 1)
    available = (await mediator.send(GetAvailableSeats(flight_id="FL100"))).result
    assert [v.seat_number for v in available] == ["3C"]

    with pytest.raises(ConcurrencyConflictError):
        await mediator.send(
            ReserveSeat(flight_id="FL100", seat_number="12A", expected_version=0)
        )

    pending = await sql_outbox_store.fetch_pending()
    assert sorted(e.event_type for e in pending) == [
        "SeatCreated",
        "SeatCreated",
        "SeatReserved",
    ]
    [reserved_entry] = [e for e in pending if e.event_type == "SeatReserved"]
    assert reserved_entry.aggregate_id == "FL100/12A"
    assert reserved_entry.payload["passenger_id"] == "p1"
