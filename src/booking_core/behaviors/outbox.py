"""OutboxBehavior — writes a command's domain events to the outbox."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from ..cqrs.response import CommandResponse
from ..domain.events import enrich_event_metadata
from ..ports.outbox import OutboxEntry
from .transaction import require_unit_of_work

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..ports.outbox import IOutboxStore

logger = logging.getLogger("booking.behaviors")


class OutboxBehavior:
    """
    Appends one outbox entry per event of a successful command.

    Must sit *inside* ``TransactionBehavior``: the entries are staged in the
    same unit of work as the aggregate change and become visible only when
    it commits. A handler failure never reaches the append.

    Events are enriched with the command's ``correlation_id`` and with the
    ``command_id`` as ``causation_id`` before they are stored.
    """

    def __init__(self, store: IOutboxStore) -> None:
        self._store = store

    async def __call__(
        self,
        request: Any,
        next_step: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        response = await next_step(request)
        if not isinstance(response, CommandResponse) or not response.events:
            return response

        uow = require_unit_of_work()
        enriched = [
            enrich_event_metadata(
                event,
                correlation_id=getattr(request, "correlation_id", None),
                causation_id=getattr(request, "command_id", None),
            )
            for event in response.events
        ]
        for event in enriched:
            logger.debug("Appending %s to outbox", event.event_type)
            await self._store.append(OutboxEntry.from_event(event), uow)
        return replace(response, events=enriched)
