"""Errors raised by the SQLAlchemy adapters."""

from __future__ import annotations

from booking_core.primitives.exceptions import PersistenceError


class SQLAlchemyPersistenceError(PersistenceError):
    """A database operation of the SQLAlchemy adapters failed."""


class SessionManagementError(SQLAlchemyPersistenceError):
    """A session could not be opened or closed, or was configured wrongly."""


class UnitOfWorkError(SQLAlchemyPersistenceError):
    """Commit or rollback failed, or the unit of work is not open."""


class RepositoryError(SQLAlchemyPersistenceError):
    """A repository was used with a unit of work it cannot write through."""
