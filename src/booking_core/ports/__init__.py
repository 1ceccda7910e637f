from .background_worker import IBackgroundWorker
from .behavior import IPipelineBehavior
from .messaging import IMessagePublisher
from .outbox import IOutboxStore, OutboxEntry, OutboxStatus
from .repository import IRepository
from .unit_of_work import UnitOfWork, require_active
from .validation import IValidator

__all__ = [
    "IBackgroundWorker",
    "IMessagePublisher",
    "IOutboxStore",
    "IPipelineBehavior",
    "IRepository",
    "IValidator",
    "OutboxEntry",
    "OutboxStatus",
    "UnitOfWork",
    "require_active",
]
