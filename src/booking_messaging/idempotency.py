"""IdempotencyFilter — deduplicate redelivered messages by message_id."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .envelope import MessageEnvelope

logger = logging.getLogger("booking.messaging")


class IdempotencyFilter:
    """Deduplicate messages by message_id to prevent double-execution on redelivery.

    The outbox delivers at least once, so a consumer may see the same
    ``message_id`` more than once. The filter remembers the most recent
    ``max_entries`` ids, oldest forgotten first.
    """

    def __init__(self, *, max_entries: int = 100_000) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._seen: OrderedDict[str, None] = OrderedDict()

    async def is_duplicate(self, message_id: str) -> bool:
        """Return True if this message_id has already been processed."""
        return message_id in self._seen

    async def mark_processed(self, message_id: str) -> None:
        """Record that this message_id has been processed."""
        self._seen[message_id] = None
        self._seen.move_to_end(message_id)
        while len(self._seen) > self._max_entries:
            self._seen.popitem(last=False)

    async def handle(
        self,
        envelope: MessageEnvelope,
        handler: Callable[[MessageEnvelope], Awaitable[Any]],
    ) -> bool:
        """Run *handler* unless the envelope was already processed.

        The id is recorded only after the handler succeeds, so a failed
        attempt is processed again on redelivery. Returns False for a
        skipped duplicate.
        """
        if await self.is_duplicate(envelope.message_id):
            logger.debug("Skipping duplicate message %s", envelope.message_id)
            return False
        await handler(envelope)
        await self.mark_processed(envelope.message_id)
        return True

    def clear_memory(self) -> None:
        """Clear the seen set (for testing)."""
        self._seen.clear()

    def __len__(self) -> int:
        return len(self._seen)
