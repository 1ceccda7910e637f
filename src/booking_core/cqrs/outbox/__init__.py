"""Outbox processing: batch publisher and its background worker."""

from .processor import OutboxProcessor
from .worker import OutboxWorker

__all__ = ["OutboxProcessor", "OutboxWorker"]
