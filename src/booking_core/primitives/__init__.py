"""Lowest-level building blocks: exceptions and retry policy."""

from .exceptions import (
    BookingCoreError,
    ConcurrencyConflictError,
    ConcurrencyError,
    DomainError,
    DuplicateHandlerError,
    EntityNotFoundError,
    HandlerError,
    HandlerNotFoundError,
    InfrastructureError,
    InternalError,
    InvariantViolationError,
    NoActiveTransactionError,
    NotFoundError,
    OutboxError,
    PersistenceError,
    ReentrantDispatchError,
    RegistryFrozenError,
    RequestTimeoutError,
    ValidationError,
    Violation,
)
from .retry import RetryPolicy

__all__ = [
    "BookingCoreError",
    "ConcurrencyConflictError",
    "ConcurrencyError",
    "DomainError",
    "DuplicateHandlerError",
    "EntityNotFoundError",
    "HandlerError",
    "HandlerNotFoundError",
    "InfrastructureError",
    "InternalError",
    "InvariantViolationError",
    "NoActiveTransactionError",
    "NotFoundError",
    "OutboxError",
    "PersistenceError",
    "ReentrantDispatchError",
    "RegistryFrozenError",
    "RequestTimeoutError",
    "RetryPolicy",
    "ValidationError",
    "Violation",
]
