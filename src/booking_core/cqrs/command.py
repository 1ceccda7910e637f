"""Command base class — immutable intent to change state."""

from __future__ import annotations

import uuid
from typing import Generic

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import TypeVar

from ..correlation import get_correlation_id

TResult = TypeVar("TResult", default=None)


class Command(BaseModel, Generic[TResult]):
    """
    Base for all commands.

    Commands represent write operations that change system state. They:
    - Are named with imperative verbs (e.g., ReserveSeat, ReleaseSeat)
    - Return results via CommandResponse
    - Run inside a unit of work opened by ``TransactionBehavior``

    The ``correlation_id`` is automatically inherited from the current context
    (see :func:`~booking_core.correlation.get_correlation_id`). If no
    correlation ID is active in the context, it defaults to ``None`` and the
    Mediator will generate one at dispatch time.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    command_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    correlation_id: str | None = Field(default_factory=get_correlation_id)
