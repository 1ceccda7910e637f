"""RabbitMQ transport (optional extra: ``booking-core[rabbitmq]``)."""

from __future__ import annotations

from .connection import RabbitMQConnectionManager
from .publisher import RabbitMQPublisher
from .settings import RabbitMQSettings

__all__ = [
    "RabbitMQConnectionManager",
    "RabbitMQPublisher",
    "RabbitMQSettings",
]
