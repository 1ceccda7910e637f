"""RetryPolicy — how long a failed outbox publish waits before the next try."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True, kw_only=True)
class RetryPolicy:
    """Capped exponential backoff over a fixed number of attempts.

    ``attempt`` is 1-based and counts the attempt that just failed. After
    attempt *n* the wait is ``base_delay * 2 ** (n - 1)`` seconds, capped at
    ``max_delay``; with ``jitter`` it is scaled by a random factor in
    ``[0.5, 1.5]`` so that entries failing together do not retry together.
    Attempt ``max_attempts`` is the last one.
    """

    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 60.0
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if min(self.base_delay, self.max_delay) < 0:
            raise ValueError("base_delay and max_delay must be >= 0")
        if self.base_delay > self.max_delay:
            raise ValueError("base_delay must be <= max_delay")

    def should_retry(self, attempt: int) -> bool:
        return 1 <= attempt < self.max_attempts

    def delay_for_attempt(self, attempt: int) -> float:
        """Seconds to wait after *attempt* failed (0 for attempt < 1)."""
        if attempt < 1:
            return 0.0
        delay = min(self.base_delay * 2 ** (attempt - 1), self.max_delay)
        if self.jitter:
            delay *= 0.5 + random.random()  # noqa: S311
        return float(delay)

    def retry_at(self, attempt: int, now: datetime) -> datetime | None:
        """When the entry is due again, or ``None`` once retries are exhausted."""
        if not self.should_retry(attempt):
            return None
        return now + timedelta(seconds=self.delay_for_attempt(attempt))
