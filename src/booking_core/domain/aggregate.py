"""Aggregate Root base class with optimistic versioning."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast
from uuid import UUID

from pydantic import BaseModel, ConfigDict, PrivateAttr

from ..primitives.exceptions import ConcurrencyConflictError

if TYPE_CHECKING:
    from typing_extensions import Self

    from .events import DomainEvent

ID = TypeVar("ID", str, int, UUID)


class AggregateRoot(BaseModel, Generic[ID]):
    """Base class for all Aggregate Roots.

    Generic over ``ID`` to support UUID, int, or str primary keys.
    Collects domain events and tracks two versions:

    * ``version`` — current in-memory version, bumped once per accepted
      transition via :meth:`_bump_version`.
    * ``original_version`` — the version the aggregate was loaded with.
      Repositories write conditionally on it (optimistic concurrency).

    Usage::

        class Seat(AggregateRoot[str]):
            status: SeatStatus = SeatStatus.AVAILABLE

        seat = Seat(id="FL100/12A")                   # new, version 0
        seat = Seat.rehydrate(version=3, id="FL100/12A", status=...)  # loaded
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: ID
    _version: int = PrivateAttr(default=0)
    _original_version: int = PrivateAttr(default=0)
    _domain_events: list[DomainEvent] = PrivateAttr(
        default_factory=lambda: cast("list[DomainEvent]", [])
    )

    @classmethod
    def rehydrate(cls, *, version: int, **data: Any) -> Self:
        """Rebuild an aggregate from persisted state at *version*."""
        aggregate = cls(**data)
        aggregate._version = version
        aggregate._original_version = version
        return aggregate

    @property
    def version(self) -> int:
        """Read-only version, managed by transitions and the persistence layer."""
        return self._version

    @property
    def original_version(self) -> int:
        """Version observed when the aggregate was loaded."""
        return self._original_version

    @property
    def is_dirty(self) -> bool:
        return self._version != self._original_version

    def add_event(self, event: DomainEvent) -> None:
        """Record a domain event to be written to the outbox."""
        self._domain_events.append(event)

    def collect_events(self) -> list[DomainEvent]:
        """Return all recorded events and clear the internal list."""
        events = list(self._domain_events)
        self._domain_events.clear()
        return events

    def mark_persisted(self) -> None:
        """Treat the current version as the stored one."""
        self._original_version = self._version

    # -- helpers for subclasses ---------------------------------------------

    def _check_version(self, expected_version: int) -> None:
        if expected_version != self._version:
            raise ConcurrencyConflictError(
                f"{type(self).__name__} {self.id!r} is at version {self._version}, "
                f"caller expected {expected_version}",
                aggregate_id=self.id,
                expected_version=expected_version,
                actual_version=self._version,
            )

    def _bump_version(self) -> int:
        self._version += 1
        return self._version
