"""InMemoryOutboxStore — outbox table inside an InMemoryDatabase."""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import TYPE_CHECKING

from ...ports.outbox import IOutboxStore, OutboxEntry, OutboxStatus
from ...ports.unit_of_work import require_active
from ...primitives.exceptions import OutboxError
from ...utils import utc_now
from .database import InMemoryDatabase, StagedWrite
from .unit_of_work import InMemoryUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from ...ports.unit_of_work import UnitOfWork

OUTBOX_TABLE = "outbox"


class InMemoryOutboxStore(IOutboxStore):
    """In-memory implementation of ``IOutboxStore``.

    ``append`` stages the entry in the caller's :class:`InMemoryUnitOfWork`;
    it lands in the database table on commit. Claims and status changes
    act on committed rows directly; each is a single synchronous step, so
    no other task can interleave with it.
    """

    def __init__(
        self,
        database: InMemoryDatabase,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._database = database
        self._clock = clock

    async def append(self, entry: OutboxEntry, uow: UnitOfWork | None) -> None:
        active = require_active(uow)
        if not isinstance(active, InMemoryUnitOfWork):
            raise OutboxError(
                f"InMemoryOutboxStore cannot write through {type(active).__name__}"
            )
        active.stage(StagedWrite(OUTBOX_TABLE, entry.entry_id, copy.deepcopy(entry)))

    async def fetch_pending(
        self, limit: int = 100, older_than: datetime | None = None
    ) -> list[OutboxEntry]:
        now = self._clock()
        pending = [
            entry
            for entry in self._rows()
            if entry.status is OutboxStatus.PENDING
            and (entry.next_attempt_at is None or entry.next_attempt_at <= now)
            and (older_than is None or entry.created_at < older_than)
        ]
        pending.sort(key=lambda e: e.created_at)
        return [copy.deepcopy(e) for e in pending[:limit]]

    async def claim(
        self, entry_id: str, token: str, lease_until: datetime, now: datetime
    ) -> bool:
        entry = self._table().get(entry_id)
        if entry is None or not entry.is_claimable(now):
            return False
        entry.claim_token = token
        entry.claim_expires_at = lease_until
        return True

    async def mark_published(self, entry_id: str, token: str | None = None) -> bool:
        entry = self._require(entry_id)
        if entry.status is OutboxStatus.PUBLISHED or not _holds(entry, token):
            return False
        entry.status = OutboxStatus.PUBLISHED
        entry.published_at = self._clock()
        entry.attempt_count += 1
        entry.next_attempt_at = None
        entry.claim_token = None
        entry.claim_expires_at = None
        return True

    async def mark_failed(
        self,
        entry_id: str,
        error: str,
        retry_at: datetime | None,
        token: str | None = None,
    ) -> bool:
        entry = self._require(entry_id)
        if entry.status is not OutboxStatus.PENDING or not _holds(entry, token):
            return False
        entry.attempt_count += 1
        entry.last_error = error
        entry.claim_token = None
        entry.claim_expires_at = None
        if retry_at is None:
            entry.status = OutboxStatus.FAILED
            entry.next_attempt_at = None
        else:
            entry.next_attempt_at = retry_at
        return True

    async def get(self, entry_id: str) -> OutboxEntry | None:
        entry = self._table().get(entry_id)
        return copy.deepcopy(entry) if entry is not None else None

    async def fetch_failed(self, limit: int = 100) -> list[OutboxEntry]:
        failed = [e for e in self._rows() if e.status is OutboxStatus.FAILED]
        failed.sort(key=lambda e: e.created_at)
        return [copy.deepcopy(e) for e in failed[:limit]]

    async def requeue(self, entry_id: str) -> bool:
        table = self._table()
        entry = table.get(entry_id)
        if entry is None or entry.status is not OutboxStatus.FAILED:
            return False
        table[entry_id] = replace(
            entry,
            status=OutboxStatus.PENDING,
            attempt_count=0,
            next_attempt_at=None,
            claim_token=None,
            claim_expires_at=None,
        )
        return True

    async def purge_published(self, older_than: datetime) -> int:
        table = self._table()
        stale = [
            entry_id
            for entry_id, entry in table.items()
            if entry.status is OutboxStatus.PUBLISHED
            and entry.published_at is not None
            and entry.published_at < older_than
        ]
        for entry_id in stale:
            del table[entry_id]
        return len(stale)

    # ── Internals ────────────────────────────────────────────────

    def _table(self) -> dict[str, OutboxEntry]:
        return self._database.table(OUTBOX_TABLE)

    def _rows(self) -> list[OutboxEntry]:
        return list(self._table().values())

    def _require(self, entry_id: str) -> OutboxEntry:
        entry = self._table().get(entry_id)
        if entry is None:
            raise OutboxError(f"Unknown outbox entry {entry_id!r}")
        return entry

    # ── Test helpers ─────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._table())


def _holds(entry: OutboxEntry, token: str | None) -> bool:
    return token is None or entry.claim_token == token
