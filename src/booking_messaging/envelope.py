"""MessageEnvelope — standard immutable wrapper for transport."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageEnvelope(BaseModel):
    """Immutable wrapper for messages over the wire.

    Carries payload, tracing IDs, and retry metadata. ``message_id`` is the
    outbox entry id, so it stays the same across redeliveries and consumers
    deduplicate on it.
    """

    model_config = ConfigDict(frozen=True)

    message_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str = Field(..., description="Registry key, e.g. 'SeatReserved'")
    payload: dict[str, object] = Field(default_factory=dict)
    correlation_id: str | None = None
    causation_id: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    headers: dict[str, str] = Field(default_factory=dict)
    attempt: int = Field(default=1, ge=1, description="Delivery attempt count")


def envelope_from(message: Any, **kwargs: Any) -> MessageEnvelope:
    """Build a MessageEnvelope from a publish call.

    *kwargs* are the publisher metadata (``message_id``, ``event_type``,
    ``correlation_id``, ``causation_id``, ``attempt``, ``headers``); unknown
    keys are ignored.
    """
    if isinstance(message, MessageEnvelope):
        return message

    payload: dict[str, object]
    if hasattr(message, "model_dump"):
        payload = message.model_dump(mode="json")
        default_type = getattr(message, "event_type", type(message).__name__)
    elif isinstance(message, dict):
        payload = message
        default_type = str(message.get("event_type", "unknown"))
    else:
        payload = {"value": message}
        default_type = "unknown"

    fields: dict[str, Any] = {
        "event_type": kwargs.get("event_type") or default_type,
        "payload": payload,
        "correlation_id": kwargs.get("correlation_id"),
        "causation_id": kwargs.get("causation_id"),
        "headers": kwargs.get("headers") or {},
        "attempt": kwargs.get("attempt") or 1,
    }
    if kwargs.get("message_id"):
        fields["message_id"] = kwargs["message_id"]
    return MessageEnvelope(**fields)
