"""In-memory adapters: database, unit of work, outbox store."""

from .database import InMemoryDatabase, StagedWrite
from .outbox import InMemoryOutboxStore
from .unit_of_work import InMemoryUnitOfWork, in_memory_unit_of_work_factory

__all__ = [
    "InMemoryDatabase",
    "InMemoryOutboxStore",
    "InMemoryUnitOfWork",
    "StagedWrite",
    "in_memory_unit_of_work_factory",
]
