"""Handler base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from .response import CommandResponse, QueryResponse

TResult = TypeVar("TResult")  # Result type


class CommandHandler(ABC, Generic[TResult]):
    """Base class for command handlers.

    Handler instances are registered explicitly with a ``HandlerRegistry`` at
    startup, with their collaborators (repositories) passed to ``__init__``.
    The active unit of work is available through
    :func:`~booking_core.behaviors.transaction.require_unit_of_work`.

    Usage::

        class ReserveSeatHandler(CommandHandler[int]):
            async def handle(self, command: ReserveSeat) -> CommandResponse[int]:
                ...
    """

    @abstractmethod
    async def handle(self, command: Any) -> CommandResponse[TResult]:
        """Execute the command and return a CommandResponse."""
        ...


class QueryHandler(ABC, Generic[TResult]):
    """Base class for query handlers.

    Usage::

        class GetSeatHandler(QueryHandler[SeatView | None]):
            async def handle(self, query: GetSeat) -> QueryResponse[SeatView | None]:
                ...
    """

    @abstractmethod
    async def handle(self, query: Any) -> QueryResponse[TResult]:
        """Execute the query and return a QueryResponse."""
        ...
