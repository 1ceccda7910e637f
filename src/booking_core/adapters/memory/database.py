"""InMemoryDatabase — committed state shared by in-memory adapters."""

from __future__ import annotations

import asyncio
import copy
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ...primitives.exceptions import ConcurrencyConflictError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger("booking.uow")


@dataclass(frozen=True)
class StagedWrite:
    """A row write held by a unit of work until commit.

    ``expected_version=None`` is an insert (the key must not exist yet);
    otherwise the stored version must still equal ``expected_version``.
    """

    table: str
    key: str
    value: Any
    version: int = 0
    expected_version: int | None = None


class InMemoryDatabase:
    """Tables of deep-copied rows plus a version per row.

    :meth:`apply` is the commit: it checks every staged write against the
    stored versions first and only then applies all of them, under an
    ``asyncio.Lock``. A single stale write fails the whole commit with
    :class:`ConcurrencyConflictError` and nothing is written.
    """

    def __init__(self) -> None:
        self._tables: defaultdict[str, dict[str, Any]] = defaultdict(dict)
        self._versions: dict[tuple[str, str], int] = {}
        self._lock = asyncio.Lock()

    async def apply(self, writes: Iterable[StagedWrite]) -> None:
        writes = list(writes)
        if not writes:
            return
        async with self._lock:
            # Later writes in the batch see the versions of earlier ones.
            versions = dict(self._versions)
            for write in writes:
                _check(write, versions.get((write.table, write.key)))
                versions[(write.table, write.key)] = write.version
            for write in writes:
                self._tables[write.table][write.key] = copy.deepcopy(write.value)
                self._versions[(write.table, write.key)] = write.version
        logger.debug("Committed %d write(s)", len(writes))

    # ── Reads ────────────────────────────────────────────────────

    def get(self, table: str, key: str) -> Any | None:
        """Deep copy of one committed row, or None."""
        row = self._tables[table].get(key)
        return copy.deepcopy(row) if row is not None else None

    def version_of(self, table: str, key: str) -> int | None:
        return self._versions.get((table, key))

    def rows(self, table: str) -> list[Any]:
        """Deep copies of every committed row in *table*."""
        return [copy.deepcopy(row) for row in self._tables[table].values()]

    def table(self, table: str) -> dict[str, Any]:
        """Live committed rows, for adapters that update in place."""
        return self._tables[table]

    # ── Test helpers ─────────────────────────────────────────────

    def clear(self) -> None:
        self._tables.clear()
        self._versions.clear()


def _check(write: StagedWrite, stored: int | None) -> None:
    if write.expected_version is None:
        if stored is not None:
            raise ConcurrencyConflictError(
                f"{write.table} row {write.key!r} already exists",
                aggregate_id=write.key,
                actual_version=stored,
            )
        return
    if stored != write.expected_version:
        raise ConcurrencyConflictError(
            f"{write.table} row {write.key!r} is at version {stored}, "
            f"expected {write.expected_version}",
            aggregate_id=write.key,
            expected_version=write.expected_version,
            actual_version=stored,
        )
