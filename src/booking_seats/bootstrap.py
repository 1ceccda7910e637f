"""Composition root: wires handlers and behaviors into a Mediator."""

from __future__ import annotations

from typing import TYPE_CHECKING

from booking_core.behaviors import (
    BehaviorRegistry,
    CorrelationBehavior,
    LoggingBehavior,
    OutboxBehavior,
    TransactionBehavior,
    ValidationBehavior,
)
from booking_core.config import MediatorSettings
from booking_core.cqrs import HandlerRegistry, Mediator

from .commands import CreateSeat, ReleaseSeat, ReserveSeat
from .handlers import (
    CreateSeatHandler,
    GetAvailableSeatsHandler,
    GetSeatHandler,
    ReleaseSeatHandler,
    ReserveSeatHandler,
)
from .queries import GetAvailableSeats, GetSeat
from .validators import build_seat_validator

if TYPE_CHECKING:
    from collections.abc import Callable

    from booking_core.ports.outbox import IOutboxStore
    from booking_core.ports.unit_of_work import UnitOfWork
    from booking_core.ports.validation import IValidator

    from .ports import ISeatRepository

# Lower runs first (outermost).
LOGGING_PRIORITY = 0
CORRELATION_PRIORITY = 10
VALIDATION_PRIORITY = 20
TRANSACTION_PRIORITY = 30
OUTBOX_PRIORITY = 40


def register_seat_handlers(
    registry: HandlerRegistry, repository: ISeatRepository
) -> None:
    registry.register(CreateSeat, CreateSeatHandler(repository))
    registry.register(ReserveSeat, ReserveSeatHandler(repository))
    registry.register(ReleaseSeat, ReleaseSeatHandler(repository))
    registry.register(GetSeat, GetSeatHandler(repository))
    registry.register(GetAvailableSeats, GetAvailableSeatsHandler(repository))


def build_behaviors(
    uow_factory: Callable[[], UnitOfWork],
    outbox_store: IOutboxStore,
    *,
    validator: IValidator | None = None,
    settings: MediatorSettings | None = None,
) -> BehaviorRegistry:
    """Logging → Correlation → Validation → Transaction → Outbox → handler."""
    settings = settings or MediatorSettings()
    behaviors = BehaviorRegistry()
    behaviors.register(LoggingBehavior(), priority=LOGGING_PRIORITY)
    behaviors.register(CorrelationBehavior(), priority=CORRELATION_PRIORITY)
    behaviors.register(
        ValidationBehavior(validator or build_seat_validator()),
        priority=VALIDATION_PRIORITY,
    )
    behaviors.register(
        TransactionBehavior(uow_factory, timeout=settings.transaction_timeout),
        priority=TRANSACTION_PRIORITY,
    )
    behaviors.register(OutboxBehavior(outbox_store), priority=OUTBOX_PRIORITY)
    return behaviors


def build_mediator(
    *,
    repository: ISeatRepository,
    uow_factory: Callable[[], UnitOfWork],
    outbox_store: IOutboxStore,
    validator: IValidator | None = None,
    settings: MediatorSettings | None = None,
) -> Mediator:
    """Build the seat service's Mediator.

    Usage (in-memory)::

        database = InMemoryDatabase()
        mediator = build_mediator(
            repository=InMemorySeatRepository(database),
            uow_factory=in_memory_unit_of_work_factory(database),
            outbox_store=InMemoryOutboxStore(database),
        )
        response = await mediator.send(
            ReserveSeat(flight_id="FL100", seat_number="12A", expected_version=0)
        )
    """
    registry = HandlerRegistry()
    register_seat_handlers(registry, repository)
    behaviors = build_behaviors(
        uow_factory, outbox_store, validator=validator, settings=settings
    )
    return Mediator(registry, behavior_registry=behaviors)
