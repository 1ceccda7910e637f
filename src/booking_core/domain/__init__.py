"""Domain building blocks: aggregates and events."""

from .aggregate import AggregateRoot
from .events import DomainEvent, enrich_event_metadata

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "enrich_event_metadata",
]
