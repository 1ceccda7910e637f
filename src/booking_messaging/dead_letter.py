"""Dead-letter publishing for outbox entries that exhausted their retries."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .envelope import MessageEnvelope

if TYPE_CHECKING:
    from booking_core.ports.messaging import IMessagePublisher
    from booking_core.ports.outbox import OutboxEntry

logger = logging.getLogger("booking.messaging")


class DeadLetterPublisher:
    """``on_dead_letter`` callback for the outbox processor.

    Re-publishes an entry that moved to FAILED onto a dead-letter topic,
    with the failure reason in the headers, so operators see it without
    polling the outbox table.

    Usage::

        processor = OutboxProcessor(
            store, broker, on_dead_letter=DeadLetterPublisher(broker)
        )
    """

    def __init__(
        self, publisher: IMessagePublisher, *, topic: str = "booking.dead_letter"
    ) -> None:
        self._publisher = publisher
        self.topic = topic

    async def __call__(self, entry: OutboxEntry, exception: BaseException) -> None:
        envelope = MessageEnvelope(
            message_id=entry.entry_id,
            event_type=entry.event_type,
            payload=entry.payload,
            correlation_id=entry.correlation_id,
            causation_id=entry.causation_id,
            attempt=max(entry.attempt_count, 1),
            headers={
                "x-dead-letter-reason": entry.last_error or str(exception),
                "x-aggregate-id": entry.aggregate_id or "",
            },
        )
        logger.warning(
            "Dead-lettering outbox entry %s to %s", entry.entry_id, self.topic
        )
        await self._publisher.publish(
            self.topic,
            envelope,
            message_id=envelope.message_id,
            event_type=envelope.event_type,
        )
