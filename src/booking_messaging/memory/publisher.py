"""InMemoryPublisher — IMessagePublisher with assertion helpers for tests."""

from __future__ import annotations

from typing import Any

from booking_core.ports.messaging import IMessagePublisher

from ..envelope import MessageEnvelope, envelope_from
from .bus import InMemoryMessageBus


class InMemoryPublisher(IMessagePublisher):
    """In-memory publisher that wraps messages in envelopes and hands them to a bus.

    Pass a shared InMemoryMessageBus to connect subscribers so that publish()
    triggers their handlers. get_published() and assert_published()
    support test assertions.
    """

    def __init__(self, bus: InMemoryMessageBus | None = None) -> None:
        """If bus is None, a new bus is created (no subscribers)."""
        self._bus = bus or InMemoryMessageBus()

    async def publish(self, topic: str, message: Any, **kwargs: Any) -> None:
        """Publish to the in-memory bus (and trigger any subscribed handlers)."""
        await self._bus.publish(topic, envelope_from(message, **kwargs))

    def get_published(self) -> list[tuple[str, MessageEnvelope]]:
        """Return all (topic, envelope) published so far."""
        return self._bus.get_published()

    def assert_published(
        self,
        event_type: str,
        count: int = 1,
        topic: str | None = None,
    ) -> None:
        """Assert that exactly `count` messages with this event_type were published.

        Optionally restrict to a specific topic. Raises AssertionError if not met.
        """
        published = self.get_published()
        if topic is not None:
            published = [(t, e) for t, e in published if t == topic]
        matching = [e for _, e in published if e.event_type == event_type]
        assert len(matching) == count, (
            f"Expected {count} message(s) with event_type={event_type!r}, "
            f"got {len(matching)}. Published: "
            f"{[e.event_type for _, e in published]}"
        )

    @property
    def bus(self) -> InMemoryMessageBus:
        """Return the bus (e.g. to subscribe handlers)."""
        return self._bus
