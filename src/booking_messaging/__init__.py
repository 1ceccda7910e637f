"""Broker-facing messaging for booking-core — envelopes, in-memory bus, RabbitMQ."""

from __future__ import annotations

from .dead_letter import DeadLetterPublisher
from .envelope import MessageEnvelope, envelope_from
from .exceptions import (
    MessagingConnectionError,
    MessagingError,
    MessagingSerializationError,
)
from .idempotency import IdempotencyFilter
from .memory import InMemoryMessageBus, InMemoryPublisher
from .serialization import EnvelopeSerializer

__all__ = [
    "DeadLetterPublisher",
    "EnvelopeSerializer",
    "IdempotencyFilter",
    "InMemoryMessageBus",
    "InMemoryPublisher",
    "MessageEnvelope",
    "MessagingConnectionError",
    "MessagingError",
    "MessagingSerializationError",
    "envelope_from",
]
