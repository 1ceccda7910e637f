"""SeatReservation aggregate and its events."""

from __future__ import annotations

import enum
from typing import Any

from booking_core.domain import AggregateRoot, DomainEvent

from .exceptions import SeatAlreadyReservedError, SeatNotReservedError


class SeatStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    RELEASED = "RELEASED"


def seat_key(flight_id: str, seat_number: str) -> str:
    """Aggregate id of a seat: ``"FL100/12A"``."""
    return f"{flight_id}/{seat_number}"


class SeatCreated(DomainEvent):
    flight_id: str
    seat_number: str


class SeatReserved(DomainEvent):
    flight_id: str
    seat_number: str
    passenger_id: str | None = None


class SeatReleased(DomainEvent):
    flight_id: str
    seat_number: str
    passenger_id: str | None = None


class SeatReservation(AggregateRoot[str]):
    """One seat on one flight.

    Every accepted transition checks the caller's ``expected_version``
    against the loaded version, bumps the version by exactly one and records
    one event. The repository then writes conditionally on the loaded
    version, so a concurrent transition that committed first turns this
    one into a ``ConcurrencyConflictError``.
    """

    flight_id: str
    seat_number: str
    status: SeatStatus = SeatStatus.AVAILABLE
    reserved_by: str | None = None

    @classmethod
    def create(cls, flight_id: str, seat_number: str) -> SeatReservation:
        """A new, available seat at version 0."""
        seat = cls(
            id=seat_key(flight_id, seat_number),
            flight_id=flight_id,
            seat_number=seat_number,
        )
        seat.add_event(SeatCreated(**seat._event_fields()))
        return seat

    @property
    def is_available(self) -> bool:
        return self.status is not SeatStatus.RESERVED

    def reserve(self, expected_version: int, passenger_id: str | None = None) -> None:
        self._check_version(expected_version)
        if self.status is SeatStatus.RESERVED:
            raise SeatAlreadyReservedError(self.id)
        self.status = SeatStatus.RESERVED
        self.reserved_by = passenger_id
        self._bump_version()
        self.add_event(SeatReserved(**self._event_fields(), passenger_id=passenger_id))

    def release(self, expected_version: int) -> None:
        self._check_version(expected_version)
        if self.status is not SeatStatus.RESERVED:
            raise SeatNotReservedError(self.id)
        passenger_id = self.reserved_by
        self.status = SeatStatus.RELEASED
        self.reserved_by = None
        self._bump_version()
        self.add_event(SeatReleased(**self._event_fields(), passenger_id=passenger_id))

    def _event_fields(self) -> dict[str, Any]:
        return {
            "aggregate_id": self.id,
            "aggregate_type": type(self).__name__,
            "aggregate_version": self.version,
            "flight_id": self.flight_id,
            "seat_number": self.seat_number,
        }
