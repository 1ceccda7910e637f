"""IBackgroundWorker — lifecycle of a polling background task."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IBackgroundWorker(Protocol):
    """
    A loop that runs beside the request path, e.g. ``OutboxWorker``.

    ``start`` and ``stop`` are idempotent. ``trigger`` asks for an immediate
    pass instead of waiting for the next poll.
    """

    @property
    def is_running(self) -> bool: ...

    async def start(self) -> None:
        """Start the loop in a background task."""
        ...

    async def stop(self) -> None:
        """Stop the loop and wait for the current pass to finish."""
        ...

    def trigger(self) -> None: ...
