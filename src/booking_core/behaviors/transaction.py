"""TransactionBehavior — one unit of work per root command."""

from __future__ import annotations

import asyncio
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from ..cqrs.command import Command
from ..ports.unit_of_work import require_active
from ..primitives.exceptions import RequestTimeoutError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..ports.unit_of_work import UnitOfWork

logger = logging.getLogger("booking.behaviors")

#: ContextVar tracking the current UoW; ``None`` means we are not inside
#: any command scope yet (the root command will open a new one).
_current_uow: ContextVar[UnitOfWork | None] = ContextVar("current_uow", default=None)


def current_unit_of_work() -> UnitOfWork | None:
    """Return the active UoW (or *None* if outside a command scope)."""
    return _current_uow.get()


def require_unit_of_work() -> UnitOfWork:
    """Return the active UoW or raise ``NoActiveTransactionError``."""
    return require_active(_current_uow.get())


class TransactionBehavior:
    """Opens, commits and rolls back the unit of work around a command.

    **Scope detection:** a command dispatched while another command's unit
    of work is open (a nested ``send`` from inside a handler) joins that
    unit of work; only the root command commits.

    **Deadline:** the inner chain runs under ``timeout`` seconds. On expiry
    the unit of work is rolled back and :class:`RequestTimeoutError` raised.

    **Cancellation:** the transactional work runs in its own task and the
    caller awaits it through :func:`asyncio.shield`. A caller that goes away
    (client disconnect, outer timeout) does not cancel it, so the write
    either commits or rolls back as a whole, never half way.

    Queries pass straight through.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        *,
        timeout: float | None = 30.0,
    ) -> None:
        self._uow_factory = uow_factory
        self._timeout = timeout
        self._tasks: set[asyncio.Task[Any]] = set()

    async def __call__(
        self,
        request: Any,
        next_step: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        if not isinstance(request, Command):
            return await next_step(request)

        existing = _current_uow.get()
        if existing is not None and existing.is_active:
            # Nested command: reuse the parent UoW
            return await next_step(request)

        task = asyncio.create_task(self._run(request, next_step))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.done():
                logger.warning(
                    "Caller of %s went away; its transaction keeps running",
                    type(request).__name__,
                )
                task.add_done_callback(_log_detached_outcome)
            raise

    async def _run(
        self,
        request: Any,
        next_step: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        request_name = type(request).__name__
        async with self._uow_factory() as uow:
            token = _current_uow.set(uow)
            try:
                return await asyncio.wait_for(next_step(request), self._timeout)
            except asyncio.TimeoutError as exc:
                if self._timeout is None:
                    raise
                raise RequestTimeoutError(request_name, self._timeout) from exc
            finally:
                _current_uow.reset(token)

    async def drain(self) -> None:
        """Wait for transactions whose callers already went away."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


def _log_detached_outcome(task: asyncio.Task[Any]) -> None:
    if task.cancelled():
        logger.warning("Detached transaction was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Detached transaction failed: %s", exc, exc_info=exc)
    else:
        logger.info("Detached transaction committed")
