"""Mediator — the single dispatch point for commands and queries."""

from __future__ import annotations

import dataclasses
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ..behaviors.pipeline import build_pipeline
from ..correlation import generate_correlation_id, get_correlation_id
from ..primitives.exceptions import (
    BookingCoreError,
    InternalError,
    ReentrantDispatchError,
)
from .response import CommandResponse, QueryResponse

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..behaviors.registry import BehaviorRegistry
    from ..ports.behavior import IPipelineBehavior
    from .command import Command
    from .query import Query
    from .registry import HandlerRegistry

logger = logging.getLogger("booking.mediator")

TResult = TypeVar("TResult")

#: Request types currently being handled in this task's call chain.
_in_flight: ContextVar[tuple[type[Any], ...]] = ContextVar(
    "in_flight_requests", default=()
)


class Mediator:
    """Routes commands / queries through the behavior chain to their handlers.

    The registry is frozen on construction and kept private: handlers are
    reachable only through :meth:`send`. The behavior order is taken from
    the ``BehaviorRegistry`` once, at startup.

    ``send`` either returns the handler's response or raises exactly one
    :class:`~booking_core.primitives.exceptions.BookingCoreError`. Anything
    else escaping the chain is wrapped in ``InternalError``.

    Parameters
    ----------
    registry:
        :class:`~booking_core.cqrs.registry.HandlerRegistry` instance.
    behavior_registry:
        Optional :class:`~booking_core.behaviors.registry.BehaviorRegistry`.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        *,
        behavior_registry: BehaviorRegistry | None = None,
    ) -> None:
        registry.freeze()
        self._registry = registry
        self._behaviors: tuple[IPipelineBehavior, ...] = (
            tuple(behavior_registry.get_ordered_behaviors())
            if behavior_registry is not None
            else ()
        )

    # ── Public API ───────────────────────────────────────────────

    @overload
    async def send(self, request: Command[TResult]) -> CommandResponse[TResult]: ...

    @overload
    async def send(self, request: Query[TResult]) -> QueryResponse[TResult]: ...

    async def send(self, request: Any) -> Any:
        """Dispatch *request* through the behavior chain to its handler.

        Raises:
            HandlerNotFoundError: no handler registered for the request type.
            ReentrantDispatchError: the request type is already being handled
                further up this call chain.
            BookingCoreError: any typed failure from a behavior or handler.
            InternalError: wraps every other exception.
        """
        request_type = type(request)
        in_flight = _in_flight.get()
        if request_type in in_flight:
            raise ReentrantDispatchError(request_type)

        # Ensure correlation_id exists for tracking
        if not getattr(request, "correlation_id", None):
            request = _with_correlation_id(
                request, get_correlation_id() or generate_correlation_id()
            )

        handler = self._registry.resolve(request_type)
        pipeline = build_pipeline(list(self._behaviors), _as_callable(handler))

        token = _in_flight.set((*in_flight, request_type))
        try:
            response = await pipeline(request)
        except BookingCoreError:
            raise
        except Exception as exc:
            raise InternalError(request_type.__name__, exc) from exc
        finally:
            _in_flight.reset(token)

        return self._propagate_ids(request, response)

    # ── Internals ────────────────────────────────────────────────

    def _propagate_ids(self, request: Any, response: Any) -> Any:
        """Propagate correlation ID and causation ID from request to response."""
        if not isinstance(response, (CommandResponse, QueryResponse)):
            return response

        request_id = getattr(request, "command_id", None) or getattr(
            request, "query_id", None
        )
        return response.traced(getattr(request, "correlation_id", None), request_id)


def _as_callable(handler: Any) -> Callable[[Any], Awaitable[Any]]:
    handle = getattr(handler, "handle", None)
    if handle is not None:
        return handle  # type: ignore[no-any-return]
    return handler  # type: ignore[no-any-return]


def _with_correlation_id(request: Any, correlation_id: str) -> Any:
    """Copy of *request* carrying *correlation_id*, where it has that field.

    Pydantic requests and dataclasses with a ``correlation_id`` field are
    copied; any other plain value is dispatched unchanged.
    """
    if hasattr(request, "model_copy"):
        return request.model_copy(update={"correlation_id": correlation_id})
    if dataclasses.is_dataclass(request) and not isinstance(request, type):
        names = {f.name for f in dataclasses.fields(request)}
        if "correlation_id" in names:
            return dataclasses.replace(request, correlation_id=correlation_id)
    return request
