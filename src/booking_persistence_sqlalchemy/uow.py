"""
SQLAlchemy unit of work: one ``AsyncSession`` transaction per command.
"""

from __future__ import annotations

import contextlib
import functools
import logging
from typing import TYPE_CHECKING

from booking_core.ports.unit_of_work import UnitOfWork

from .exceptions import SessionManagementError, UnitOfWorkError

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSession

    AsyncSessionFactory = Callable[[], AsyncSession]

logger = logging.getLogger("booking.uow")


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Unit of work over an ``AsyncSession``.

    Give it exactly one of:

    * ``session_factory`` — the unit of work opens a session on enter and
      closes it on exit. This is what :func:`sqlalchemy_unit_of_work_factory`
      hands to ``TransactionBehavior``::

          factory = async_sessionmaker(engine, expire_on_commit=False)
          transaction = TransactionBehavior(sqlalchemy_unit_of_work_factory(factory))

    * ``session`` — a session owned by the caller; only its transaction is
      committed or rolled back here.

    Repositories and the outbox store write through :attr:`session`, so the
    seat row and its outbox rows share one database transaction.
    """

    def __init__(
        self,
        session: AsyncSession | None = None,
        session_factory: AsyncSessionFactory | None = None,
    ) -> None:
        if (session is None) == (session_factory is None):
            raise SessionManagementError(
                "Pass exactly one of 'session' (caller-managed) or "
                "'session_factory' (opened and closed by the unit of work)"
            )
        super().__init__()
        self._session = session
        self._session_factory = session_factory

    @property
    def owns_session(self) -> bool:
        return self._session_factory is not None

    @property
    def session(self) -> AsyncSession:
        """The session of the open unit of work."""
        if self._session is None:
            raise UnitOfWorkError("No session: the unit of work is not open")
        return self._session

    async def __aenter__(self) -> SQLAlchemyUnitOfWork:
        try:
            if self._session_factory is not None:
                self._session = self._session_factory()
            if not self.session.in_transaction():
                await self.session.begin()
        except UnitOfWorkError:
            raise
        except Exception as e:  # noqa: BLE001
            raise SessionManagementError(f"Could not open unit of work: {e}") from e

        await super().__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            if self.owns_session and self._session is not None:
                await self._close()

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except Exception as e:  # noqa: BLE001
            # Unique violations and lost connections surface here.
            with contextlib.suppress(Exception):
                await self.rollback()
            raise UnitOfWorkError(f"Commit failed: {e}") from e
        logger.debug("SQLAlchemy unit of work committed")

    async def rollback(self) -> None:
        try:
            if self.session.in_transaction():
                await self.session.rollback()
                logger.debug("SQLAlchemy unit of work rolled back")
        except Exception as e:  # noqa: BLE001
            raise UnitOfWorkError(f"Rollback failed: {e}") from e

    async def _close(self) -> None:
        session, self._session = self.session, None
        try:
            await session.close()
        except Exception as e:  # noqa: BLE001
            raise SessionManagementError(f"Could not close session: {e}") from e


def sqlalchemy_unit_of_work_factory(
    session_factory: AsyncSessionFactory,
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """``uow_factory`` for ``TransactionBehavior``: a fresh session per command."""
    return functools.partial(SQLAlchemyUnitOfWork, session_factory=session_factory)
