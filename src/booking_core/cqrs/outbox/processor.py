"""OutboxProcessor — publishes committed outbox entries to the broker."""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from ...primitives.retry import RetryPolicy
from ...utils import utc_now

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime

    from ...config import OutboxSettings
    from ...ports.messaging import IMessagePublisher
    from ...ports.outbox import IOutboxStore, OutboxEntry

logger = logging.getLogger("booking.outbox")


def _default_topic(event_type: str) -> str:
    return event_type


class OutboxProcessor:
    """
    Moves outbox entries from PENDING to PUBLISHED (or FAILED).

    Lifecycle per batch:

    1. Fetch pending entries, oldest first.
    2. **Claim** each one with this batch's token and a lease of
       ``claim_ttl`` seconds. Entries another processor holds are skipped.
    3. Publish the payload with ``message_id = entry_id`` and tracing
       metadata; returning normally is the acknowledgement.
    4. Mark published, or record the failure with a backoff. Once
       ``retry_policy.max_attempts`` is reached the entry becomes FAILED
       and ``on_dead_letter`` is called.
       Both marks carry the batch token and are skipped if the lease was
       taken over in the meantime.

    A crash between publish and mark leads to redelivery once the lease
    expires. Consumers deduplicate on the message id.
    """

    def __init__(
        self,
        store: IOutboxStore,
        publisher: IMessagePublisher,
        *,
        retry_policy: RetryPolicy | None = None,
        batch_size: int = 100,
        claim_ttl: float = 30.0,
        settle_delay: float = 0.0,
        topic_resolver: Callable[[str], str] | None = None,
        on_dead_letter: Callable[[OutboxEntry, BaseException], Awaitable[None]]
        | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.publisher = publisher
        self.retry_policy = retry_policy or RetryPolicy()
        self.batch_size = batch_size
        self.claim_ttl = claim_ttl
        self.settle_delay = settle_delay
        self._topic_for = topic_resolver or _default_topic
        self._on_dead_letter = on_dead_letter
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        store: IOutboxStore,
        publisher: IMessagePublisher,
        settings: OutboxSettings,
        **kwargs: Any,
    ) -> OutboxProcessor:
        return cls(
            store,
            publisher,
            retry_policy=settings.retry_policy(),
            batch_size=settings.batch_size,
            claim_ttl=settings.claim_ttl,
            settle_delay=settings.settle_delay,
            **kwargs,
        )

    async def process_batch(self) -> int:
        """
        Process up to ``batch_size`` pending entries.

        Returns the number of entries published.
        """
        now = self._clock()
        older_than = (
            now - timedelta(seconds=self.settle_delay) if self.settle_delay else None
        )
        entries = await self.store.fetch_pending(self.batch_size, older_than)
        if not entries:
            return 0

        token = uuid.uuid4().hex
        lease_until = now + timedelta(seconds=self.claim_ttl)
        claimed = [
            entry
            for entry in entries
            if await self.store.claim(entry.entry_id, token, lease_until, now)
        ]
        if not claimed:
            logger.debug("No entries could be claimed (held by other processors)")
            return 0

        logger.debug("Claimed %d/%d outbox entries", len(claimed), len(entries))

        published = 0
        for entry in claimed:
            if await self._publish(entry, token):
                published += 1
        return published

    async def _publish(self, entry: OutboxEntry, token: str) -> bool:
        attempt = entry.attempt_count + 1
        try:
            await self.publisher.publish(
                self._topic_for(entry.event_type),
                entry.payload,
                message_id=entry.entry_id,
                event_type=entry.event_type,
                correlation_id=entry.correlation_id,
                causation_id=entry.causation_id,
                attempt=attempt,
            )
        except Exception as exc:  # noqa: BLE001
            await self._record_failure(entry, token, attempt, exc)
            return False

        if not await self.store.mark_published(entry.entry_id, token):
            # Lease expired and another processor holds the entry now.
            logger.warning(
                "Published outbox entry %s after losing its claim", entry.entry_id
            )
            return True
        logger.debug("Published outbox entry %s (%s)", entry.entry_id, entry.event_type)
        return True

    async def _record_failure(
        self, entry: OutboxEntry, token: str, attempt: int, exc: Exception
    ) -> None:
        error = f"{type(exc).__name__}: {exc}"
        now = self._clock()
        retry_at = self.retry_policy.retry_at(attempt, now)
        if not await self.store.mark_failed(entry.entry_id, error, retry_at, token):
            logger.warning(
                "Publishing outbox entry %s failed after losing its claim; "
                "leaving it to the current claimant: %s",
                entry.entry_id,
                error,
            )
            return
        if retry_at is not None:
            logger.warning(
                "Publishing outbox entry %s failed (attempt %d/%d), retry in %.2fs: %s",
                entry.entry_id,
                attempt,
                self.retry_policy.max_attempts,
                (retry_at - now).total_seconds(),
                error,
            )
            return

        logger.error(
            "Outbox entry %s (%s) failed after %d attempts; moved to FAILED: %s",
            entry.entry_id,
            entry.event_type,
            attempt,
            error,
        )
        if self._on_dead_letter is None:
            return
        failed = await self.store.get(entry.entry_id) or entry
        try:
            await self._on_dead_letter(failed, exc)
        except Exception as dl_exc:  # noqa: BLE001
            logger.error(
                "Dead-letter callback failed for %s: %s",
                entry.entry_id,
                dl_exc,
                exc_info=True,
            )
