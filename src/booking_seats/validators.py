"""Request validators for seat commands and queries."""

from __future__ import annotations

from booking_core.validation import (
    PydanticValidator,
    Rule,
    RuleValidator,
    TypeRoutingValidator,
    matches,
    optional_matches,
)

from .commands import CreateSeat, ReleaseSeat, ReserveSeat
from .queries import GetAvailableSeats, GetSeat

FLIGHT_PATTERN = r"[A-Z0-9]{2}[0-9]{1,4}"
SEAT_PATTERN = r"[1-9][0-9]?[A-K]"
PASSENGER_PATTERN = r"[A-Za-z0-9_-]{1,64}"

flight_rule = matches("flight_id", FLIGHT_PATTERN, "must be a flight number like FL100")
seat_rule = matches("seat_number", SEAT_PATTERN, "must be a seat like 12A")
version_rule = Rule(
    "expected_version",
    lambda v: isinstance(v, int) and v >= 0,
    "must be a non-negative integer",
)
passenger_rule = optional_matches(
    "passenger_id", PASSENGER_PATTERN, "must be 1-64 letters, digits, '-' or '_'"
)


def build_seat_validator() -> TypeRoutingValidator:
    """Every seat request type mapped to the rules that apply to it."""
    validator = TypeRoutingValidator()
    pydantic = PydanticValidator()
    for request_type in (CreateSeat, ReserveSeat, ReleaseSeat, GetSeat, GetAvailableSeats):
        validator.register(request_type, pydantic)

    validator.register(CreateSeat, RuleValidator([flight_rule, seat_rule]))
    validator.register(
        ReserveSeat,
        RuleValidator([flight_rule, seat_rule, version_rule, passenger_rule]),
    )
    validator.register(ReleaseSeat, RuleValidator([flight_rule, seat_rule, version_rule]))
    validator.register(GetSeat, RuleValidator([flight_rule, seat_rule]))
    validator.register(GetAvailableSeats, RuleValidator([flight_rule]))
    return validator
