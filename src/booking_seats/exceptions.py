"""Seat reservation errors."""

from __future__ import annotations

from booking_core.primitives.exceptions import (
    DomainError,
    EntityNotFoundError,
    InvariantViolationError,
)


class SeatNotFoundError(EntityNotFoundError):
    def __init__(self, seat_id: str) -> None:
        super().__init__("SeatReservation", seat_id)


class SeatAlreadyExistsError(DomainError):
    def __init__(self, seat_id: str) -> None:
        self.seat_id = seat_id
        super().__init__(f"Seat {seat_id!r} already exists")


class SeatAlreadyReservedError(InvariantViolationError):
    """Raised when reserving a seat that is already reserved."""

    def __init__(self, seat_id: str) -> None:
        self.seat_id = seat_id
        super().__init__(f"Seat {seat_id!r} is already reserved")


class SeatNotReservedError(InvariantViolationError):
    """Raised when releasing a seat that is not reserved."""

    def __init__(self, seat_id: str) -> None:
        self.seat_id = seat_id
        super().__init__(f"Seat {seat_id!r} is not reserved")
