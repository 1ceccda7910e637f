"""In-memory message bus for testing — connects publisher and subscribers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

    from ..envelope import MessageEnvelope


class InMemoryMessageBus:
    """Shared bus: publish appends envelopes and
    synchronously invokes handlers subscribed to the topic."""

    def __init__(self) -> None:
        self._messages: list[tuple[str, MessageEnvelope]] = []
        self._handlers: dict[str, list[Callable[..., Coroutine[Any, Any, None]]]] = {}

    def subscribe(
        self,
        topic: str,
        handler: Callable[[MessageEnvelope], Coroutine[Any, Any, None]],
    ) -> None:
        """Register a handler for the topic."""
        self._handlers.setdefault(topic, []).append(handler)

    async def publish(self, topic: str, envelope: MessageEnvelope) -> None:
        """Append envelope and invoke all handlers for the topic."""
        self._messages.append((topic, envelope))
        for h in self._handlers.get(topic, []):
            await h(envelope)

    def get_published(self) -> list[tuple[str, MessageEnvelope]]:
        """Return all published (topic, envelope) in order."""
        return list(self._messages)

    def clear(self) -> None:
        """Clear published messages and handlers (for test teardown)."""
        self._messages.clear()
        self._handlers.clear()
