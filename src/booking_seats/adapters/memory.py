"""InMemorySeatRepository — seats stored in an InMemoryDatabase."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from booking_core.adapters.memory import InMemoryUnitOfWork, StagedWrite
from booking_core.ports.unit_of_work import require_active
from booking_core.primitives.exceptions import PersistenceError

from ..domain import SeatReservation

if TYPE_CHECKING:
    from booking_core.adapters.memory import InMemoryDatabase
    from booking_core.ports.unit_of_work import UnitOfWork

SEATS_TABLE = "seat_reservations"


class InMemorySeatRepository:
    """Seat repository over :class:`InMemoryDatabase`.

    Writes are staged in the caller's unit of work. ``save`` stages an
    update guarded by the seat's ``original_version``; the guard is checked
    when the unit of work commits.
    """

    def __init__(self, database: InMemoryDatabase) -> None:
        self._database = database

    async def add(self, entity: SeatReservation, uow: UnitOfWork | None) -> str:
        self._unit_of_work(uow).stage(
            StagedWrite(SEATS_TABLE, entity.id, _to_row(entity), version=entity.version)
        )
        entity.mark_persisted()
        return entity.id

    async def get(
        self, entity_id: str, uow: UnitOfWork | None = None
    ) -> SeatReservation | None:
        if isinstance(uow, InMemoryUnitOfWork):
            row = uow.read(SEATS_TABLE, entity_id)
        else:
            row = self._database.get(SEATS_TABLE, entity_id)
        return _from_row(row) if row is not None else None

    async def save(self, entity: SeatReservation, uow: UnitOfWork | None) -> None:
        active = self._unit_of_work(uow)
        if not entity.is_dirty:
            return
        active.stage(
            StagedWrite(
                SEATS_TABLE,
                entity.id,
                _to_row(entity),
                version=entity.version,
                expected_version=entity.original_version,
            )
        )
        entity.mark_persisted()

    async def list_by_flight(
        self, flight_id: str, uow: UnitOfWork | None = None  # noqa: ARG002
    ) -> list[SeatReservation]:
        seats = [
            _from_row(row)
            for row in self._database.rows(SEATS_TABLE)
            if row["flight_id"] == flight_id
        ]
        return sorted(seats, key=lambda s: s.seat_number)

    @staticmethod
    def _unit_of_work(uow: UnitOfWork | None) -> InMemoryUnitOfWork:
        active = require_active(uow)
        if not isinstance(active, InMemoryUnitOfWork):
            raise PersistenceError(
                f"InMemorySeatRepository cannot write through {type(active).__name__}"
            )
        return active


def _to_row(seat: SeatReservation) -> dict[str, Any]:
    return {**seat.model_dump(mode="json"), "version": seat.version}


def _from_row(row: dict[str, Any]) -> SeatReservation:
    data = dict(row)
    version = data.pop("version")
    return SeatReservation.rehydrate(version=version, **data)
