"""IMessagePublisher — outbound port to the message broker."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IMessagePublisher(Protocol):
    """
    Port for publishing messages to a transport (RabbitMQ, in-memory, …).

    Returning normally is the broker acknowledgement; raising is a failed
    publish. Infrastructure packages provide concrete adapters.
    """

    async def publish(self, topic: str, message: Any, **kwargs: Any) -> None:
        """
        Publish *message* to *topic*.

        Args:
            topic: Routing key, topic name, or exchange.
            message: Payload — may be a domain event, dict, or envelope.
            **kwargs: Transport metadata (``message_id``, ``event_type``,
                ``correlation_id``, ``causation_id``, ``attempt``, headers, …).
        """
        ...
