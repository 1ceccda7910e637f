"""SQLAlchemySeatRepository — version-conditional writes on seat_reservations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Enum, Integer, String, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, mapped_column

from booking_core.ports.unit_of_work import require_active
from booking_core.primitives.exceptions import ConcurrencyConflictError
from booking_persistence_sqlalchemy import (
    Base,
    RepositoryError,
    SQLAlchemyUnitOfWork,
)

from ..domain import SeatReservation, SeatStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from booking_core.ports.unit_of_work import UnitOfWork


class SeatModel(Base):
    __tablename__ = "seat_reservations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    flight_id: Mapped[str] = mapped_column(String, index=True)
    seat_number: Mapped[str] = mapped_column(String(8))
    status: Mapped[SeatStatus] = mapped_column(
        Enum(SeatStatus), default=SeatStatus.AVAILABLE
    )
    reserved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=0)


class SQLAlchemySeatRepository:
    """
    Seat repository on SQLAlchemy.

    ``save`` issues ``UPDATE ... WHERE id = :id AND version = :original``
    inside the caller's transaction. Zero rows updated means another request
    committed first: :class:`ConcurrencyConflictError`, and the unit of work
    rolls back together with its outbox rows.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, entity: SeatReservation, uow: UnitOfWork | None) -> str:
        session = self._session(uow)
        session.add(_to_model(entity))
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConcurrencyConflictError(
                f"SeatReservation {entity.id!r} was created concurrently",
                aggregate_id=entity.id,
            ) from e
        entity.mark_persisted()
        return entity.id

    async def get(
        self, entity_id: str, uow: UnitOfWork | None = None
    ) -> SeatReservation | None:
        stmt = select(SeatModel).where(SeatModel.id == entity_id)
        if isinstance(uow, SQLAlchemyUnitOfWork):
            model = (await uow.session.execute(stmt)).scalar_one_or_none()
        else:
            async with self._session_factory() as session:
                model = (await session.execute(stmt)).scalar_one_or_none()
        return _from_model(model) if model is not None else None

    async def save(self, entity: SeatReservation, uow: UnitOfWork | None) -> None:
        session = self._session(uow)
        if not entity.is_dirty:
            return
        stmt = (
            update(SeatModel)
            .where(
                SeatModel.id == entity.id,
                SeatModel.version == entity.original_version,
            )
            .values(
                status=entity.status,
                reserved_by=entity.reserved_by,
                version=entity.version,
            )
        )
        result = await session.execute(
            stmt, execution_options={"synchronize_session": False}
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise ConcurrencyConflictError(
                f"SeatReservation {entity.id!r} changed since version "
                f"{entity.original_version} was loaded",
                aggregate_id=entity.id,
                expected_version=entity.original_version,
            )
        entity.mark_persisted()

    async def list_by_flight(
        self, flight_id: str, uow: UnitOfWork | None = None
    ) -> list[SeatReservation]:
        stmt = (
            select(SeatModel)
            .where(SeatModel.flight_id == flight_id)
            .order_by(SeatModel.seat_number)
        )
        if isinstance(uow, SQLAlchemyUnitOfWork):
            models = (await uow.session.execute(stmt)).scalars().all()
        else:
            async with self._session_factory() as session:
                models = (await session.execute(stmt)).scalars().all()
        return [_from_model(m) for m in models]

    @staticmethod
    def _session(uow: UnitOfWork | None) -> AsyncSession:
        active = require_active(uow)
        if not isinstance(active, SQLAlchemyUnitOfWork):
            raise RepositoryError(
                f"SQLAlchemySeatRepository cannot write through {type(active).__name__}"
            )
        return active.session


def _to_model(seat: SeatReservation) -> SeatModel:
    return SeatModel(
        id=seat.id,
        flight_id=seat.flight_id,
        seat_number=seat.seat_number,
        status=seat.status,
        reserved_by=seat.reserved_by,
        version=seat.version,
    )


def _from_model(model: SeatModel) -> SeatReservation:
    return SeatReservation.rehydrate(
        version=model.version,
        id=model.id,
        flight_id=model.flight_id,
        seat_number=model.seat_number,
        status=SeatStatus(model.status),
        reserved_by=model.reserved_by,
    )
