"""Seat queries and the read model they return."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from booking_core.cqrs import Query

from .domain import SeatReservation, SeatStatus


class SeatView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    flight_id: str
    seat_number: str
    status: SeatStatus
    reserved_by: str | None = None
    version: int

    @classmethod
    def of(cls, seat: SeatReservation) -> SeatView:
        return cls(
            id=seat.id,
            flight_id=seat.flight_id,
            seat_number=seat.seat_number,
            status=seat.status,
            reserved_by=seat.reserved_by,
            version=seat.version,
        )


class GetSeat(Query[SeatView | None]):
    flight_id: str
    seat_number: str


class GetAvailableSeats(Query[list[SeatView]]):
    flight_id: str
