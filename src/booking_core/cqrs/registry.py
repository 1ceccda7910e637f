"""Dispatch registry — request type to exactly one handler."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import (
    DuplicateHandlerError,
    HandlerNotFoundError,
    RegistryFrozenError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Maps each command/query type to the single handler that serves it.

    Register handler *instances* (or plain async callables) during
    bootstrapping, then :meth:`freeze`. The ``Mediator`` freezes the registry
    it is given; after that the map is a read-only ``MappingProxyType`` and
    :meth:`resolve` is a plain dictionary lookup, safe for concurrent readers
    without locking.

    **Conflict detection:** registering a second handler for the same request
    type raises :class:`DuplicateHandlerError` and keeps the first one.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Any], Any] = {}
        self._lookup: Mapping[type[Any], Any] = self._handlers
        self._frozen = False

    # ── Registration ─────────────────────────────────────────────

    def register(self, request_type: type[Any], handler: Any) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register a handler for {request_type.__name__}: "
                "the registry is frozen"
            )
        if not (hasattr(handler, "handle") or callable(handler)):
            raise TypeError(
                f"Handler for {request_type.__name__} must define handle() "
                "or be callable"
            )
        existing = self._handlers.get(request_type)
        if existing is not None:
            raise DuplicateHandlerError(request_type, existing, handler)
        self._handlers[request_type] = handler
        logger.debug(
            "Registered handler %s -> %s",
            request_type.__name__,
            getattr(handler, "__name__", type(handler).__name__),
        )

    def freeze(self) -> None:
        """Make the registry read-only. Idempotent."""
        if self._frozen:
            return
        self._lookup = MappingProxyType(dict(self._handlers))
        self._frozen = True
        logger.debug("Handler registry frozen with %d handlers", len(self._handlers))

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # ── Lookup ───────────────────────────────────────────────────

    def resolve(self, request_type: type[Any]) -> Any:
        try:
            return self._lookup[request_type]
        except KeyError:
            raise HandlerNotFoundError(request_type) from None

    def __contains__(self, request_type: object) -> bool:
        return request_type in self._lookup

    def __len__(self) -> int:
        return len(self._handlers)

    # ── Introspection ────────────────────────────────────────────

    def get_registered_handlers(self) -> dict[str, str]:
        """Return a snapshot of all registered handlers (for debugging)."""
        return {
            k.__name__: getattr(v, "__name__", type(v).__name__)
            for k, v in self._handlers.items()
        }


__all__ = ["HandlerRegistry"]
