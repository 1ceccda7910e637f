"""CQRS building blocks: requests, handlers, registry, mediator, outbox."""

from .command import Command
from .handler import CommandHandler, QueryHandler
from .mediator import Mediator
from .outbox import OutboxProcessor, OutboxWorker
from .query import Query
from .registry import HandlerRegistry
from .response import CommandResponse, QueryResponse

__all__ = [
    "Command",
    "CommandHandler",
    "CommandResponse",
    "HandlerRegistry",
    "Mediator",
    "OutboxProcessor",
    "OutboxWorker",
    "Query",
    "QueryHandler",
    "QueryResponse",
]
