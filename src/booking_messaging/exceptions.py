"""Errors raised by the broker-facing side of the booking services."""

from __future__ import annotations

from booking_core.primitives.exceptions import InfrastructureError


class MessagingError(InfrastructureError):
    """Root of the messaging errors."""


class MessagingConnectionError(MessagingError):
    """The broker is unreachable or the channel is not open."""


class MessagingSerializationError(MessagingError):
    """Bytes that are not an envelope, or a payload that is not its event."""

