"""Correlation ID management — fundamental to distributed tracing."""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

# ContextVar for correlation/causation tracking across async boundaries.
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_causation_id: ContextVar[str | None] = ContextVar("causation_id", default=None)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    """Set correlation ID in context."""
    _correlation_id.set(correlation_id)


def get_causation_id() -> str | None:
    """Get current causation ID from context."""
    return _causation_id.get()


def set_causation_id(causation_id: str | None) -> None:
    """Set causation ID in context."""
    _causation_id.set(causation_id)


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


class CorrelationBehavior:
    """Binds the request's correlation ID to the context while it is handled.

    Anything logged or recorded further down the chain (nested requests,
    outbox entries) picks the ID up from :func:`get_correlation_id`.
    The previous context values are restored on the way out.
    """

    async def __call__(
        self,
        request: Any,
        next_step: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        correlation_id = getattr(request, "correlation_id", None)
        request_id = getattr(request, "command_id", None) or getattr(
            request, "query_id", None
        )
        correlation_token = _correlation_id.set(
            correlation_id or get_correlation_id()
        )
        causation_token = _causation_id.set(request_id or get_causation_id())
        try:
            return await next_step(request)
        finally:
            _causation_id.reset(causation_token)
            _correlation_id.reset(correlation_token)
