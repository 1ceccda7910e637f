from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from booking_core.ports.outbox import OutboxStatus
from booking_persistence_sqlalchemy import (
    OutboxModel,
    SessionManagementError,
    SQLAlchemyUnitOfWork,
    UnitOfWorkError,
    sqlalchemy_unit_of_work_factory,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


def _row(entry_id: str) -> OutboxModel:
    return OutboxModel(
        entry_id=entry_id,
        event_type="SeatReserved",
        payload={"seat_number": "12A"},
        status=OutboxStatus.PENDING,
        attempt_count=0,
    )


async def _count(session_factory: async_sessionmaker[AsyncSession]) -> int:
    async with session_factory() as session:
        return int(await session.scalar(select(func.count(OutboxModel.id))) or 0)


@pytest.mark.asyncio
async def test_commit_on_clean_exit(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    uow = SQLAlchemyUnitOfWork(session_factory=session_factory)

    async with uow:
        assert uow.is_active
        uow.session.add(_row("e-1"))

    assert not uow.is_active
    assert await _count(session_factory) == 1


@pytest.mark.asyncio
async def test_rollback_on_exception(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    with pytest.raises(RuntimeError):
        async with SQLAlchemyUnitOfWork(session_factory=session_factory) as uow:
            uow.session.add(_row("e-1"))
            await uow.session.flush()
            raise RuntimeError("boom")

    assert await _count(session_factory) == 0


@pytest.mark.asyncio
async def test_owned_session_is_released_after_exit(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    uow = SQLAlchemyUnitOfWork(session_factory=session_factory)
    async with uow:
        pass

    with pytest.raises(UnitOfWorkError):
        _ = uow.session


@pytest.mark.asyncio
async def test_caller_managed_session_stays_open(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        async with SQLAlchemyUnitOfWork(session=session) as uow:
            uow.session.add(_row("e-1"))

        assert uow.session is session

    assert await _count(session_factory) == 1


@pytest.mark.asyncio
async def test_failed_commit_is_wrapped(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with SQLAlchemyUnitOfWork(session_factory=session_factory) as uow:
        uow.session.add(_row("dup"))

    with pytest.raises(UnitOfWorkError):
        async with SQLAlchemyUnitOfWork(session_factory=session_factory) as uow:
            uow.session.add(_row("dup"))

    assert await _count(session_factory) == 1


def test_session_arguments_are_exclusive(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    with pytest.raises(SessionManagementError):
        SQLAlchemyUnitOfWork()
    with pytest.raises(SessionManagementError):
        SQLAlchemyUnitOfWork(session=session_factory(), session_factory=session_factory)


def test_factory_builds_self_managed_units(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    factory = sqlalchemy_unit_of_work_factory(session_factory)

    first, second = factory(), factory()

    assert isinstance(first, SQLAlchemyUnitOfWork)
    assert first is not second
