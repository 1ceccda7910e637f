"""Runtime settings for the mediator and the outbox processor.

Values come from keyword arguments or from the environment, e.g.
``BOOKING_OUTBOX_BATCH_SIZE=200`` or ``BOOKING_MEDIATOR_TRANSACTION_TIMEOUT=5``.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .primitives.retry import RetryPolicy


class OutboxSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOKING_OUTBOX_",
        env_ignore_empty=True,
        extra="ignore",
    )

    batch_size: int = Field(default=100, ge=1)
    poll_interval: float = Field(default=1.0, gt=0)  # seconds between idle polls
    claim_ttl: float = Field(default=30.0, gt=0)  # lease held while publishing
    max_attempts: int = Field(default=5, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=60.0, ge=0)
    jitter: bool = True
    # Entries younger than this are left for the next poll.
    settle_delay: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _check_delays(self) -> OutboxSettings:
        if self.base_delay > self.max_delay:
            raise ValueError("base_delay must be <= max_delay")
        return self

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            jitter=self.jitter,
        )


class MediatorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOKING_MEDIATOR_",
        env_ignore_empty=True,
        extra="ignore",
    )

    # None disables the deadline.
    transaction_timeout: Annotated[float, Field(gt=0)] | None = 30.0
