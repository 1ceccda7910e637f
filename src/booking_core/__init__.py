"""booking-core — mediator, pipeline behaviors and transactional outbox."""

from .behaviors import (
    BehaviorRegistry,
    CorrelationBehavior,
    LoggingBehavior,
    OutboxBehavior,
    TransactionBehavior,
    ValidationBehavior,
    current_unit_of_work,
    require_unit_of_work,
)
from .config import MediatorSettings, OutboxSettings
from .cqrs import (
    Command,
    CommandHandler,
    CommandResponse,
    HandlerRegistry,
    Mediator,
    OutboxProcessor,
    OutboxWorker,
    Query,
    QueryHandler,
    QueryResponse,
)
from .domain import AggregateRoot, DomainEvent
from .ports import IOutboxStore, OutboxEntry, OutboxStatus, UnitOfWork
from .primitives import BookingCoreError, RetryPolicy

__all__ = [
    "AggregateRoot",
    "BehaviorRegistry",
    "BookingCoreError",
    "Command",
    "CommandHandler",
    "CommandResponse",
    "CorrelationBehavior",
    "DomainEvent",
    "HandlerRegistry",
    "IOutboxStore",
    "LoggingBehavior",
    "Mediator",
    "MediatorSettings",
    "OutboxBehavior",
    "OutboxEntry",
    "OutboxProcessor",
    "OutboxSettings",
    "OutboxStatus",
    "OutboxWorker",
    "Query",
    "QueryHandler",
    "QueryResponse",
    "RetryPolicy",
    "TransactionBehavior",
    "UnitOfWork",
    "ValidationBehavior",
    "current_unit_of_work",
    "require_unit_of_work",
]
