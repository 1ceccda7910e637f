"""Command and query handlers for seats."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from booking_core.behaviors import require_unit_of_work
from booking_core.cqrs import CommandHandler, CommandResponse, QueryHandler, QueryResponse

from .domain import SeatReservation, seat_key
from .exceptions import SeatAlreadyExistsError, SeatNotFoundError
from .queries import SeatView

if TYPE_CHECKING:
    from booking_core.ports.unit_of_work import UnitOfWork

    from .commands import CreateSeat, ReleaseSeat, ReserveSeat
    from .ports import ISeatRepository
    from .queries import GetAvailableSeats, GetSeat

logger = logging.getLogger("booking.seats")


class _SeatCommandHandler:
    def __init__(self, repository: ISeatRepository) -> None:
        self._repository = repository

    async def _load(self, seat_id: str, uow: UnitOfWork) -> SeatReservation:
        seat = await self._repository.get(seat_id, uow)
        if seat is None:
            raise SeatNotFoundError(seat_id)
        return seat


class CreateSeatHandler(_SeatCommandHandler, CommandHandler[str]):
    async def handle(self, command: CreateSeat) -> CommandResponse[str]:
        uow = require_unit_of_work()
        seat_id = seat_key(command.flight_id, command.seat_number)
        if await self._repository.get(seat_id, uow) is not None:
            raise SeatAlreadyExistsError(seat_id)
        seat = SeatReservation.create(command.flight_id, command.seat_number)
        await self._repository.add(seat, uow)
        return CommandResponse(result=seat.id, events=seat.collect_events())


class ReserveSeatHandler(_SeatCommandHandler, CommandHandler[int]):
    """Reserves a seat if the caller saw its current version.

    Returns the new version. The ``SeatReserved`` event travels in the
    response and is written to the outbox in the same unit of work.
    """

    async def handle(self, command: ReserveSeat) -> CommandResponse[int]:
        uow = require_unit_of_work()
        seat = await self._load(seat_key(command.flight_id, command.seat_number), uow)
        seat.reserve(command.expected_version, command.passenger_id)
        await self._repository.save(seat, uow)
        logger.debug("Seat %s reserved at version %d", seat.id, seat.version)
        return CommandResponse(result=seat.version, events=seat.collect_events())


class ReleaseSeatHandler(_SeatCommandHandler, CommandHandler[int]):
    async def handle(self, command: ReleaseSeat) -> CommandResponse[int]:
        uow = require_unit_of_work()
        seat = await self._load(seat_key(command.flight_id, command.seat_number), uow)
        seat.release(command.expected_version)
        await self._repository.save(seat, uow)
        return CommandResponse(result=seat.version, events=seat.collect_events())


class GetSeatHandler(QueryHandler[SeatView | None]):
    def __init__(self, repository: ISeatRepository) -> None:
        self._repository = repository

    async def handle(self, query: GetSeat) -> QueryResponse[SeatView | None]:
        seat = await self._repository.get(seat_key(query.flight_id, query.seat_number))
        return QueryResponse(result=SeatView.of(seat) if seat is not None else None)


class GetAvailableSeatsHandler(QueryHandler[list[SeatView]]):
    def __init__(self, repository: ISeatRepository) -> None:
        self._repository = repository

    async def handle(self, query: GetAvailableSeats) -> QueryResponse[list[SeatView]]:
        seats = await self._repository.list_by_flight(query.flight_id)
        return QueryResponse(
            result=[SeatView.of(seat) for seat in seats if seat.is_available]
        )
