"""EnvelopeSerializer — envelopes as JSON bytes, payloads back into events."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from .envelope import MessageEnvelope
from .exceptions import MessagingSerializationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from booking_core.domain.events import DomainEvent


class EnvelopeSerializer:
    """
    UTF-8 JSON wire format for :class:`MessageEnvelope`.

    Event classes are looked up by class name, which is what the outbox
    stores as ``event_type``::

        serializer = EnvelopeSerializer([SeatReserved, SeatReleased])
        event = serializer.hydrate(serializer.deserialize(body))
    """

    def __init__(self, event_types: Iterable[type[DomainEvent]] = ()) -> None:
        self._event_types: dict[str, type[DomainEvent]] = {}
        for event_type in event_types:
            self.register(event_type)

    def register(self, event_type: type[DomainEvent]) -> None:
        self._event_types[event_type.__name__] = event_type

    def serialize(self, envelope: MessageEnvelope) -> bytes:
        try:
            return json.dumps(envelope.model_dump(mode="json")).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise MessagingSerializationError(f"Cannot encode envelope: {e}") from e

    def deserialize(self, raw: bytes) -> MessageEnvelope:
        try:
            return MessageEnvelope.model_validate(json.loads(raw))
        except (UnicodeDecodeError, PydanticValidationError, ValueError) as e:
            raise MessagingSerializationError(f"Not a message envelope: {e}") from e

    def hydrate(self, envelope: MessageEnvelope) -> Any:
        """The registered event for *envelope*, else its raw payload dict."""
        event_cls = self._event_types.get(envelope.event_type)
        if event_cls is None:
            return envelope.payload
        try:
            return event_cls.model_validate(envelope.payload)
        except PydanticValidationError as e:
            raise MessagingSerializationError(
                f"Payload does not match {envelope.event_type}: {e}"
            ) from e
