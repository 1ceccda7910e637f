"""Pipeline behaviors wrapped around every dispatched request."""

from ..correlation import CorrelationBehavior
from .logging import LoggingBehavior
from .outbox import OutboxBehavior
from .pipeline import build_pipeline
from .registry import BehaviorRegistry
from .transaction import (
    TransactionBehavior,
    current_unit_of_work,
    require_unit_of_work,
)
from .validation import ValidationBehavior

__all__ = [
    "BehaviorRegistry",
    "CorrelationBehavior",
    "LoggingBehavior",
    "OutboxBehavior",
    "TransactionBehavior",
    "ValidationBehavior",
    "build_pipeline",
    "current_unit_of_work",
    "require_unit_of_work",
]
