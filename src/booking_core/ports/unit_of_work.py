"""UnitOfWork — the scoped transaction handle."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import NoActiveTransactionError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("booking.uow")


class UnitOfWork(ABC):
    """
    Abstract base class for Unit of Work implementations.

    A unit of work is exclusively owned by the request that opened it.
    Aggregate writes and outbox appends receive it explicitly and refuse to
    run unless it :attr:`is_active`.

    Lifecycle guarantee: **commit happens BEFORE on_commit hooks fire**, and a
    failed commit is rolled back before the error propagates.

    Example:
        ```python
        class SQLAlchemyUnitOfWork(UnitOfWork):
            async def commit(self):
                await self._session.commit()

            async def rollback(self):
                await self._session.rollback()
        ```
    """

    def __init__(self) -> None:
        self._on_commit_hooks: deque[Callable[[], Awaitable[Any]]] = deque()
        self._active = False

    @property
    def is_active(self) -> bool:
        """True between ``__aenter__`` and the end of commit/rollback."""
        return self._active

    def on_commit(self, callback: Callable[[], Awaitable[Any]]) -> None:
        """Register an async callback to be executed after a successful commit."""
        self._on_commit_hooks.append(callback)

    async def trigger_commit_hooks(self) -> None:
        """Execute all registered on_commit hooks.

        Called automatically by __aexit__ AFTER commit completes.
        """
        while self._on_commit_hooks:
            callback = self._on_commit_hooks.popleft()
            try:
                await callback()
            except Exception as exc:
                logger.error("Error in on_commit hook: %s", exc, exc_info=True)

    @abstractmethod
    async def commit(self) -> None:
        """Commit the transaction. Must be implemented by subclasses."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the transaction. Must be implemented by subclasses."""
        ...

    async def __aenter__(self) -> UnitOfWork:
        self._active = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """
        Exit the context manager.

        CRITICAL ORDER:
        1. If successful (exc_type is None): commit() first
        2. Then trigger_commit_hooks(), after the DB is flushed
        3. If exception (or the commit itself fails): rollback() and skip hooks
        """
        try:
            if exc_type is None:
                try:
                    await self.commit()
                except BaseException:
                    await self.rollback()
                    raise
            else:
                await self.rollback()
        finally:
            self._active = False

        if exc_type is None:
            await self.trigger_commit_hooks()
        else:
            self._on_commit_hooks.clear()


def require_active(uow: UnitOfWork | None) -> UnitOfWork:
    """Return *uow* if it is an open unit of work, else raise."""
    if uow is None or not uow.is_active:
        raise NoActiveTransactionError(
            "This write must run inside an active unit of work "
            "(dispatch it as a command through the Mediator)"
        )
    return uow
