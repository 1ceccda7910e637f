"""ISeatRepository — persistence port for SeatReservation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from booking_core.ports.repository import IRepository

from .domain import SeatReservation

if TYPE_CHECKING:
    from booking_core.ports.unit_of_work import UnitOfWork


@runtime_checkable
class ISeatRepository(IRepository[SeatReservation, str], Protocol):
    """Seat persistence; ``save`` is conditional on ``original_version``."""

    async def list_by_flight(
        self, flight_id: str, uow: UnitOfWork | None = None
    ) -> list[SeatReservation]:
        """All seats of *flight_id*, ordered by seat number."""
        ...
