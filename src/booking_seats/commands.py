"""Seat commands.

Field formats are checked by the validators in :mod:`booking_seats.validators`
so that one request reports every problem at once.
"""

from __future__ import annotations

from booking_core.cqrs import Command


class CreateSeat(Command[str]):
    flight_id: str
    seat_number: str


class ReserveSeat(Command[int]):
    """Reserve a seat; the result is the seat's new version."""

    flight_id: str
    seat_number: str
    expected_version: int
    passenger_id: str | None = None


class ReleaseSeat(Command[int]):
    flight_id: str
    seat_number: str
    expected_version: int
