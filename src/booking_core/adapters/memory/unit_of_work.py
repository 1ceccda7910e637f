"""InMemoryUnitOfWork — stages writes until commit."""

from __future__ import annotations

import copy
import functools
from typing import TYPE_CHECKING, Any

from ...ports.unit_of_work import UnitOfWork, require_active

if TYPE_CHECKING:
    from collections.abc import Callable

    from .database import InMemoryDatabase, StagedWrite


class InMemoryUnitOfWork(UnitOfWork):
    """In-memory implementation of UnitOfWork.

    Writes are staged and only reach the shared :class:`InMemoryDatabase`
    on commit, where their versions are checked. Rollback discards them.
    Records commit/rollback calls for assertions.
    """

    def __init__(self, database: InMemoryDatabase) -> None:
        super().__init__()
        self.database = database
        self._staged: list[StagedWrite] = []
        self.commit_count: int = 0
        self.rollback_count: int = 0

    def stage(self, write: StagedWrite) -> None:
        require_active(self)
        self._staged.append(write)

    def staged(self, table: str) -> list[StagedWrite]:
        return [w for w in self._staged if w.table == table]

    def read(self, table: str, key: str) -> Any | None:
        """Read *key* as this unit of work sees it (own writes first)."""
        for write in reversed(self._staged):
            if write.table == table and write.key == key:
                return copy.deepcopy(write.value)
        return self.database.get(table, key)

    async def commit(self) -> None:
        writes, self._staged = self._staged, []
        await self.database.apply(writes)
        self.commit_count += 1

    async def rollback(self) -> None:
        self._staged.clear()
        self.rollback_count += 1


def in_memory_unit_of_work_factory(
    database: InMemoryDatabase,
) -> Callable[[], InMemoryUnitOfWork]:
    """Factory for ``TransactionBehavior``: a fresh unit of work per command."""
    return functools.partial(InMemoryUnitOfWork, database)
