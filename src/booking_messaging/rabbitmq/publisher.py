"""RabbitMQPublisher — outbox entries onto a topic exchange."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import aio_pika

from booking_core.ports.messaging import IMessagePublisher

from ..envelope import envelope_from
from ..serialization import EnvelopeSerializer

if TYPE_CHECKING:
    from aio_pika.abc import AbstractExchange

    from ..envelope import MessageEnvelope
    from .connection import RabbitMQConnectionManager
    from .settings import RabbitMQSettings


class RabbitMQPublisher(IMessagePublisher):
    """
    Publishes to a durable topic exchange, the topic being the routing key.

    The AMQP ``message_id`` is the envelope's message id, which the outbox
    processor sets to the entry id; consumers deduplicate redeliveries on
    it. Messages are persistent. ``publish`` returns once the broker has
    confirmed the message (see :class:`RabbitMQConnectionManager`), and that
    return is what marks the outbox entry published.
    """

    def __init__(
        self,
        connection: RabbitMQConnectionManager,
        *,
        exchange_name: str = "booking.events",
        serializer: EnvelopeSerializer | None = None,
    ) -> None:
        self._connection = connection
        self._exchange_name = exchange_name
        self._serializer = serializer or EnvelopeSerializer()
        self._exchange: AbstractExchange | None = None

    @classmethod
    def from_settings(
        cls, connection: RabbitMQConnectionManager, settings: RabbitMQSettings
    ) -> RabbitMQPublisher:
        return cls(connection, exchange_name=settings.exchange_name)

    async def publish(self, topic: str, message: Any, **kwargs: Any) -> None:
        envelope = envelope_from(message, **kwargs)
        exchange = await self._exchange_for_publish()
        await exchange.publish(self._to_amqp(envelope), routing_key=topic)

    async def health_check(self) -> bool:
        return await self._connection.health_check()

    async def _exchange_for_publish(self) -> AbstractExchange:
        await self._connection.connect()
        if self._exchange is None:
            self._exchange = await self._connection.channel.declare_exchange(
                self._exchange_name, aio_pika.ExchangeType.TOPIC, durable=True
            )
        return self._exchange

    def _to_amqp(self, envelope: MessageEnvelope) -> aio_pika.Message:
        return aio_pika.Message(
            body=self._serializer.serialize(envelope),
            content_type="application/json",
            message_id=envelope.message_id,
            correlation_id=envelope.correlation_id,
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            headers={
                **envelope.headers,
                "event_type": envelope.event_type,
                "attempt": envelope.attempt,
            },
        )
