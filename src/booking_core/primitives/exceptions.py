"""Domain and infrastructure exceptions for booking-core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class BookingCoreError(Exception):
    """Root exception for the entire booking core."""


class DomainError(BookingCoreError):
    """Base class for all domain-related errors."""


class ConcurrencyError(BookingCoreError):
    """Base class for all concurrency-related conflicts."""


class ConcurrencyConflictError(ConcurrencyError, DomainError):
    """Raised when the caller's observed version no longer matches the stored one.

    Recoverable: the caller may reload fresh state and retry.
    """

    def __init__(
        self,
        message: str,
        *,
        aggregate_id: object | None = None,
        expected_version: int | None = None,
        actual_version: int | None = None,
    ) -> None:
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when an aggregate or resource is not found."""


class EntityNotFoundError(NotFoundError):
    """Raised when a specific entity cannot be found by ID."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id={entity_id!r} not found")


class InvariantViolationError(DomainError):
    """Raised when a domain invariant is violated."""


@dataclass(frozen=True)
class Violation:
    """A single failed validation rule."""

    field: str
    message: str


class ValidationError(BookingCoreError):
    """Raised when request validation fails.

    Carries **every** violation found, never just the first one.
    ``errors`` groups the messages by field: ``{field: [messages]}``.
    """

    def __init__(
        self,
        violations: list[Violation] | dict[str, list[str]] | str | None = None,
    ) -> None:
        if isinstance(violations, str):
            self.violations: list[Violation] = [Violation("__root__", violations)]
        elif isinstance(violations, dict):
            self.violations = [
                Violation(field_name, message)
                for field_name, messages in violations.items()
                for message in messages
            ]
        else:
            self.violations = list(violations or [])
        super().__init__(str(self.errors))

    @property
    def errors(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.field, []).append(violation.message)
        return grouped


class NoActiveTransactionError(BookingCoreError):
    """Raised when a transactional write is attempted outside a unit of work.

    This is a programming error: outbox appends and aggregate writes must run
    inside the scope opened by ``TransactionBehavior``.
    """


class RequestTimeoutError(BookingCoreError):
    """Raised when a transactional request exceeds its deadline.

    The unit of work has been rolled back by the time this is raised.
    """

    def __init__(self, request_name: str, timeout: float) -> None:
        self.request_name = request_name
        self.timeout = timeout
        super().__init__(f"{request_name} exceeded its {timeout}s deadline")


class OutboxError(BookingCoreError):
    """Raised when outbox operations fail."""


class InfrastructureError(BookingCoreError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class InternalError(BookingCoreError):
    """Wraps an unexpected failure raised while handling a request.

    The original exception is kept on ``cause`` (and chained via ``__cause__``).
    """

    def __init__(self, request_name: str, cause: BaseException) -> None:
        self.request_name = request_name
        self.cause = cause
        super().__init__(
            f"Unhandled {type(cause).__name__} while handling {request_name}: {cause}"
        )


class HandlerError(BookingCoreError):
    """Base class for handler registration and lookup errors."""


class DuplicateHandlerError(HandlerError):
    """Raised when a second handler is registered for the same request type."""

    def __init__(self, request_type: type[Any], existing: Any, rejected: Any) -> None:
        self.request_type = request_type
        self.existing = existing
        self.rejected = rejected
        super().__init__(
            f"Duplicate handler for {request_type.__name__}: "
            f"{_describe(existing)} already registered, "
            f"cannot register {_describe(rejected)}"
        )


class HandlerNotFoundError(HandlerError):
    """Raised when no handler is registered for a request type."""

    def __init__(self, request_type: type[Any]) -> None:
        self.request_type = request_type
        super().__init__(f"No handler registered for {request_type.__name__}")


class RegistryFrozenError(HandlerError):
    """Raised when registering after the registry was frozen at startup."""


class ReentrantDispatchError(HandlerError):
    """Raised when a handler dispatches the request type it is handling."""

    def __init__(self, request_type: type[Any]) -> None:
        self.request_type = request_type
        super().__init__(
            f"Re-entrant dispatch of {request_type.__name__} "
            "from inside its own handler"
        )


def _describe(handler: Any) -> str:
    return getattr(handler, "__name__", type(handler).__name__)
