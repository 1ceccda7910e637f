"""IRepository — generic repository protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable
from uuid import UUID

from ..domain.aggregate import AggregateRoot

if TYPE_CHECKING:
    from ..ports.unit_of_work import UnitOfWork

T = TypeVar("T", bound=AggregateRoot[Any])
# Explicitly list constraints to satisfy mypy
ID = TypeVar("ID", str, int, UUID)


@runtime_checkable
class IRepository(Protocol[T, ID]):
    """
    Generic Repository interface for state-stored, versioned aggregates.

    Writes take the caller's unit of work explicitly and fail with
    ``NoActiveTransactionError`` without one. ``save`` is conditional on the
    aggregate's ``original_version`` and raises ``ConcurrencyConflictError``
    when the stored version moved on.

    Reads accept ``uow=None`` and then see committed state only.
    """

    async def add(self, entity: T, uow: UnitOfWork | None) -> ID: ...

    async def get(self, entity_id: ID, uow: UnitOfWork | None = None) -> T | None: ...

    async def save(self, entity: T, uow: UnitOfWork | None) -> None: ...
