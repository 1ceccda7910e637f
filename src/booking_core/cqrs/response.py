"""What handlers return and what ``Mediator.send`` hands back."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from ..domain.events import DomainEvent

T = TypeVar("T")
R = TypeVar("R", "CommandResponse[Any]", "QueryResponse[Any]")


def _no_events() -> list[DomainEvent]:
    return []


@dataclass(frozen=True)
class CommandResponse(Generic[T]):
    """A command's result plus the domain events it recorded.

    ``OutboxBehavior`` stages ``events`` in the command's unit of work, so
    they reach the outbox only if the state change commits.
    """

    result: T
    events: list[DomainEvent] = field(default_factory=_no_events)
    success: bool = True
    correlation_id: str | None = None
    causation_id: str | None = None

    def traced(
        self, correlation_id: str | None, causation_id: str | None
    ) -> CommandResponse[T]:
        return _traced(self, correlation_id, causation_id)


@dataclass(frozen=True)
class QueryResponse(Generic[T]):
    result: T
    success: bool = True
    correlation_id: str | None = None
    causation_id: str | None = None

    def traced(
        self, correlation_id: str | None, causation_id: str | None
    ) -> QueryResponse[T]:
        return _traced(self, correlation_id, causation_id)


def _traced(response: R, correlation_id: str | None, causation_id: str | None) -> R:
    """Fill in tracing ids the handler left empty."""
    return replace(
        response,
        correlation_id=response.correlation_id or correlation_id,
        causation_id=response.causation_id or causation_id,
    )
