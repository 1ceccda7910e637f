"""
SQLAlchemy implementation of the transactional outbox store.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from booking_core.ports.outbox import IOutboxStore, OutboxEntry, OutboxStatus
from booking_core.ports.unit_of_work import require_active
from booking_core.primitives.exceptions import OutboxError
from booking_core.utils import as_utc, utc_now

from .exceptions import SQLAlchemyPersistenceError
from .models import OutboxModel
from .uow import SQLAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

    from booking_core.ports.unit_of_work import UnitOfWork


class SQLAlchemyOutboxStore(IOutboxStore):
    """
    Transactional outbox store implementation using SQLAlchemy.

    ``append`` adds the row to the caller's :class:`SQLAlchemyUnitOfWork`
    session, so it commits or rolls back with the aggregate change.

    Every processor-side operation runs in its own short transaction from
    *session_factory*. ``claim`` is a single conditional ``UPDATE``; the
    database decides which of several competing processors wins.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def append(self, entry: OutboxEntry, uow: UnitOfWork | None) -> None:
        """
        Persist the entry in the same transaction as the aggregate changes.
        """
        active = require_active(uow)
        if not isinstance(active, SQLAlchemyUnitOfWork):
            raise OutboxError(
                f"SQLAlchemyOutboxStore cannot write through {type(active).__name__}"
            )
        active.session.add(_to_model(entry))

    async def fetch_pending(
        self, limit: int = 100, older_than: datetime | None = None
    ) -> list[OutboxEntry]:
        now = self._clock()
        stmt = (
            select(OutboxModel)
            .where(
                OutboxModel.status == OutboxStatus.PENDING,
                or_(
                    OutboxModel.next_attempt_at.is_(None),
                    OutboxModel.next_attempt_at <= now,
                ),
            )
            .order_by(OutboxModel.created_at, OutboxModel.id)
            .limit(limit)
        )
        if older_than is not None:
            stmt = stmt.where(OutboxModel.created_at < older_than)
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return [_to_entry(m) for m in result.scalars().all()]

    async def claim(
        self, entry_id: str, token: str, lease_until: datetime, now: datetime
    ) -> bool:
        stmt = (
            update(OutboxModel)
            .where(
                OutboxModel.entry_id == entry_id,
                OutboxModel.status == OutboxStatus.PENDING,
                or_(
                    OutboxModel.claim_token.is_(None),
                    OutboxModel.claim_expires_at <= now,
                ),
                or_(
                    OutboxModel.next_attempt_at.is_(None),
                    OutboxModel.next_attempt_at <= now,
                ),
            )
            .values(claim_token=token, claim_expires_at=lease_until)
        )
        async with self._transaction() as session:
            rowcount = await _execute_dml(session, stmt)
            return rowcount == 1

    async def mark_published(self, entry_id: str, token: str | None = None) -> bool:
        stmt = (
            update(OutboxModel)
            .where(
                OutboxModel.entry_id == entry_id,
                OutboxModel.status != OutboxStatus.PUBLISHED,
                *_held_by(token),
            )
            .values(
                status=OutboxStatus.PUBLISHED,
                published_at=self._clock(),
                attempt_count=OutboxModel.attempt_count + 1,
                next_attempt_at=None,
                claim_token=None,
                claim_expires_at=None,
            )
        )
        return await self._transition(stmt, entry_id)

    async def mark_failed(
        self,
        entry_id: str,
        error: str,
        retry_at: datetime | None,
        token: str | None = None,
    ) -> bool:
        """
        Record a publication failure; ``retry_at=None`` is terminal.
        """
        stmt = (
            update(OutboxModel)
            .where(
                OutboxModel.entry_id == entry_id,
                OutboxModel.status == OutboxStatus.PENDING,
                *_held_by(token),
            )
            .values(
                status=OutboxStatus.FAILED if retry_at is None else OutboxStatus.PENDING,
                attempt_count=OutboxModel.attempt_count + 1,
                last_error=error,
                next_attempt_at=retry_at,
                claim_token=None,
                claim_expires_at=None,
            )
        )
        return await self._transition(stmt, entry_id)

    async def get(self, entry_id: str) -> OutboxEntry | None:
        async with self._transaction() as session:
            model = await self._find(session, entry_id)
            return _to_entry(model) if model is not None else None

    async def fetch_failed(self, limit: int = 100) -> list[OutboxEntry]:
        stmt = (
            select(OutboxModel)
            .where(OutboxModel.status == OutboxStatus.FAILED)
            .order_by(OutboxModel.created_at, OutboxModel.id)
            .limit(limit)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return [_to_entry(m) for m in result.scalars().all()]

    async def requeue(self, entry_id: str) -> bool:
        stmt = (
            update(OutboxModel)
            .where(
                OutboxModel.entry_id == entry_id,
                OutboxModel.status == OutboxStatus.FAILED,
            )
            .values(
                status=OutboxStatus.PENDING,
                attempt_count=0,
                next_attempt_at=None,
                claim_token=None,
                claim_expires_at=None,
            )
        )
        async with self._transaction() as session:
            rowcount = await _execute_dml(session, stmt)
            return rowcount == 1

    async def purge_published(self, older_than: datetime) -> int:
        stmt = delete(OutboxModel).where(
            OutboxModel.status == OutboxStatus.PUBLISHED,
            OutboxModel.published_at < older_than,
        )
        async with self._transaction() as session:
            rowcount = await _execute_dml(session, stmt)
            return rowcount

    # ── Internals ────────────────────────────────────────────────

    @contextlib.asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session, session.begin():
                yield session
        except SQLAlchemyError as e:
            raise SQLAlchemyPersistenceError(f"Outbox operation failed: {e}") from e

    async def _find(self, session: AsyncSession, entry_id: str) -> OutboxModel | None:
        result = await session.execute(
            select(OutboxModel).where(OutboxModel.entry_id == entry_id)
        )
        return result.scalar_one_or_none()

    async def _transition(self, stmt: Any, entry_id: str) -> bool:
        async with self._transaction() as session:
            if await _execute_dml(session, stmt) == 1:
                return True
            await self._require(session, entry_id)
            return False

    async def _require(self, session: AsyncSession, entry_id: str) -> None:
        if await self._find(session, entry_id) is None:
            raise OutboxError(f"Unknown outbox entry {entry_id!r}")


def _held_by(token: str | None) -> list[Any]:
    return [] if token is None else [OutboxModel.claim_token == token]


async def _execute_dml(session: AsyncSession, stmt: Any) -> int:
    result = await session.execute(
        stmt, execution_options={"synchronize_session": False}
    )
    return int(result.rowcount)  # type: ignore[attr-defined]


def _to_model(entry: OutboxEntry) -> OutboxModel:
    return OutboxModel(
        entry_id=entry.entry_id,
        aggregate_id=entry.aggregate_id,
        aggregate_type=entry.aggregate_type,
        event_type=entry.event_type,
        payload=entry.payload,
        status=entry.status,
        attempt_count=entry.attempt_count,
        last_error=entry.last_error,
        created_at=entry.created_at,
        published_at=entry.published_at,
        next_attempt_at=entry.next_attempt_at,
        claim_token=entry.claim_token,
        claim_expires_at=entry.claim_expires_at,
        correlation_id=entry.correlation_id,
        causation_id=entry.causation_id,
    )


def _to_entry(model: OutboxModel) -> OutboxEntry:
    return OutboxEntry(
        entry_id=model.entry_id,
        aggregate_id=model.aggregate_id,
        aggregate_type=model.aggregate_type,
        event_type=model.event_type,
        payload=dict(model.payload or {}),
        created_at=as_utc(model.created_at) or utc_now(),
        status=OutboxStatus(model.status),
        attempt_count=model.attempt_count,
        last_error=model.last_error,
        published_at=as_utc(model.published_at),
        next_attempt_at=as_utc(model.next_attempt_at),
        claim_token=model.claim_token,
        claim_expires_at=as_utc(model.claim_expires_at),
        correlation_id=model.correlation_id,
        causation_id=model.causation_id,
    )
