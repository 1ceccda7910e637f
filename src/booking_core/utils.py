"""Common utility functions and helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def default_dict_factory() -> dict[str, object]:
    """Factory for mutable default dict in dataclass fields.

    Use this instead of dict() or {} to avoid dataclass default_factory issues.
    """
    return {}


def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (e.g. read back from SQLite)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
