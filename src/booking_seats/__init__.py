"""Seat reservations: the aggregate, its requests and their handlers."""

from .bootstrap import build_mediator
from .commands import CreateSeat, ReleaseSeat, ReserveSeat
from .domain import (
    SeatCreated,
    SeatReleased,
    SeatReservation,
    SeatReserved,
    SeatStatus,
    seat_key,
)
from .exceptions import (
    SeatAlreadyExistsError,
    SeatAlreadyReservedError,
    SeatNotFoundError,
    SeatNotReservedError,
)
from .queries import GetAvailableSeats, GetSeat, SeatView

__all__ = [
    "CreateSeat",
    "GetAvailableSeats",
    "GetSeat",
    "ReleaseSeat",
    "ReserveSeat",
    "SeatAlreadyExistsError",
    "SeatAlreadyReservedError",
    "SeatCreated",
    "SeatNotFoundError",
    "SeatNotReservedError",
    "SeatReleased",
    "SeatReservation",
    "SeatReserved",
    "SeatStatus",
    "SeatView",
    "build_mediator",
    "seat_key",
]
