"""Domain Event base class."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class DomainEvent(BaseModel):
    """Base class for all Domain Events.

    Events are immutable and carry full tracing context. ``event_id`` doubles
    as the outbox entry id, so downstream consumers can deduplicate on it.

    ``aggregate_id``, ``aggregate_type`` and ``aggregate_version`` SHOULD be set
    by the aggregate that records the event.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 1
    aggregate_id: str | None = Field(
        default=None, description="ID of the aggregate instance this event belongs to"
    )
    aggregate_type: str | None = Field(
        default=None,
        description="Class name of the aggregate (e.g., 'SeatReservation')",
    )
    aggregate_version: int | None = Field(
        default=None,
        description="Aggregate version after the transition that raised the event",
    )
    correlation_id: str | None = None
    causation_id: str | None = None

    @property
    def event_type(self) -> str:
        return type(self).__name__


def enrich_event_metadata(
    event: DomainEvent,
    *,
    correlation_id: str | None = None,
    causation_id: str | None = None,
) -> DomainEvent:
    """Return a copy of *event* with tracing IDs injected.

    If the event already carries the requested ID the original value is kept.
    """
    updates: dict[str, str] = {}
    if correlation_id and not event.correlation_id:
        updates["correlation_id"] = correlation_id
    if causation_id and not event.causation_id:
        updates["causation_id"] = causation_id

    if not updates:
        return event

    return event.model_copy(update=updates)
