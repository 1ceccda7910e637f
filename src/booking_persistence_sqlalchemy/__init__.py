"""SQLAlchemy 2.x async persistence adapters for booking-core."""

from .exceptions import (
    RepositoryError,
    SessionManagementError,
    SQLAlchemyPersistenceError,
    UnitOfWorkError,
)
from .models import Base, OutboxModel
from .outbox import SQLAlchemyOutboxStore
from .types import JSONPayload
from .uow import SQLAlchemyUnitOfWork, sqlalchemy_unit_of_work_factory

__all__ = [
    "Base",
    "JSONPayload",
    "OutboxModel",
    "RepositoryError",
    "SQLAlchemyOutboxStore",
    "SQLAlchemyPersistenceError",
    "SQLAlchemyUnitOfWork",
    "SessionManagementError",
    "UnitOfWorkError",
    "sqlalchemy_unit_of_work_factory",
]
