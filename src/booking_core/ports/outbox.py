"""IOutboxStore — transactional outbox protocol."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from uuid import uuid4

from ..utils import default_dict_factory

if TYPE_CHECKING:
    from ..domain.events import DomainEvent
    from .unit_of_work import UnitOfWork


class OutboxStatus(str, enum.Enum):
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


@dataclass
class OutboxEntry:
    """An event waiting in the transactional outbox.

    ``PENDING`` → ``PUBLISHED`` (terminal) on broker acknowledgement;
    ``PENDING`` → ``PENDING`` (attempt_count + 1, ``next_attempt_at`` pushed
    back) on a failed publish; ``PENDING`` → ``FAILED`` (terminal, needs an
    operator) once the retry ceiling is reached.
    """

    entry_id: str = field(default_factory=lambda: str(uuid4()))
    aggregate_id: str | None = None
    aggregate_type: str | None = None
    event_type: str = ""
    payload: dict[str, object] = field(default_factory=default_dict_factory)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: OutboxStatus = OutboxStatus.PENDING
    attempt_count: int = 0
    last_error: str | None = None
    published_at: datetime | None = None
    next_attempt_at: datetime | None = None
    claim_token: str | None = None
    claim_expires_at: datetime | None = None
    correlation_id: str | None = field(
        default=None, metadata={"description": "Traces entire request chain"}
    )
    causation_id: str | None = field(
        default=None, metadata={"description": "Direct parent message ID"}
    )

    @classmethod
    def from_event(cls, event: DomainEvent) -> OutboxEntry:
        """Build a pending entry for *event*, reusing its id as the entry id."""
        return cls(
            entry_id=event.event_id,
            aggregate_id=event.aggregate_id,
            aggregate_type=event.aggregate_type,
            event_type=event.event_type,
            payload=event.model_dump(mode="json"),
            correlation_id=event.correlation_id,
            causation_id=event.causation_id,
        )

    def is_claimable(self, now: datetime) -> bool:
        """Pending, due, and not held by a live lease."""
        if self.status is not OutboxStatus.PENDING:
            return False
        if self.next_attempt_at is not None and self.next_attempt_at > now:
            return False
        return self.claim_token is None or (
            self.claim_expires_at is not None and self.claim_expires_at <= now
        )


@runtime_checkable
class IOutboxStore(Protocol):
    """Protocol for the transactional outbox pattern."""

    async def append(self, entry: OutboxEntry, uow: UnitOfWork | None) -> None:
        """
        Record *entry* in the same transaction as the aggregate change.

        Raises:
            NoActiveTransactionError: if *uow* is missing or no longer active.
        """
        ...

    async def fetch_pending(
        self, limit: int = 100, older_than: datetime | None = None
    ) -> list[OutboxEntry]:
        """Pending, due entries, oldest ``created_at`` first (best-effort order).

        Entries waiting out a retry backoff (``next_attempt_at`` in the future)
        are left out.

        If *older_than* is given only entries created before it are returned.
        """
        ...

    async def claim(
        self, entry_id: str, token: str, lease_until: datetime, now: datetime
    ) -> bool:
        """
        Atomically claim a pending, due entry for publishing.

        Succeeds only if the entry is unclaimed or its lease expired before
        *now*. Returns False when another claimant holds it.
        """
        ...

    async def mark_published(self, entry_id: str, token: str | None = None) -> bool:
        """Mark *entry_id* published. Re-marking a published entry is a no-op.

        With *token*, the update only applies while the entry is still
        claimed with that token; a processor whose lease was taken over
        cannot overwrite the new claimant's state.

        Returns:
            True if the entry changed, False if it was skipped.

        Raises:
            OutboxError: if no entry has that id.
        """
        ...

    async def mark_failed(
        self,
        entry_id: str,
        error: str,
        retry_at: datetime | None,
        token: str | None = None,
    ) -> bool:
        """
        Record a failed publish attempt and release the claim.

        Args:
            entry_id: ID of the failed entry
            error: Error description, stored as ``last_error``
            retry_at: When the entry becomes due again; ``None`` moves it to
                the terminal ``FAILED`` status.
            token: Claim token of the caller. When given, the failure is only
                recorded while the entry is still claimed with it.

        Returns:
            True if the failure was recorded, False if it was skipped.
        """
        ...

    async def get(self, entry_id: str) -> OutboxEntry | None:
        """Return a snapshot of one entry (any status)."""
        ...

    async def fetch_failed(self, limit: int = 100) -> list[OutboxEntry]:
        """Entries that exhausted their retries, oldest first."""
        ...

    async def requeue(self, entry_id: str) -> bool:
        """Move a FAILED entry back to PENDING with fresh counters."""
        ...

    async def purge_published(self, older_than: datetime) -> int:
        """Delete entries published before *older_than*; returns the count."""
        ...
