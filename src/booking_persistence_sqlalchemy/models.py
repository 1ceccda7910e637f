from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from booking_core.ports.outbox import OutboxStatus
from booking_core.utils import utc_now

from .types.json import JSONPayload


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models of the booking services.

    Domain packages put their own tables on this base so that one
    ``Base.metadata.create_all`` creates the aggregate tables and the outbox
    side by side.
    """


class OutboxModel(Base):
    """
    Model for the Outbox pattern.
    Captures domain events to be published asynchronously.
    """

    __tablename__ = "outbox"

    id: Mapped[int] = mapped_column(
        Integer().with_variant(BigInteger, "postgresql"),
        primary_key=True,
        autoincrement=True,
    )
    entry_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    aggregate_id: Mapped[str | None] = mapped_column(String, nullable=True)
    aggregate_type: Mapped[str | None] = mapped_column(String, nullable=True)
    event_type: Mapped[str] = mapped_column(String)  # e.g. "SeatReserved"
    payload: Mapped[dict[str, Any]] = mapped_column(JSONPayload)  # Dialect-agnostic JSON
    status: Mapped[OutboxStatus] = mapped_column(
        Enum(OutboxStatus), default=OutboxStatus.PENDING
    )
    attempt_count: Mapped[int] = mapped_column(Integer, default=0)
    last_error: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    next_attempt_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    claim_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    claim_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    correlation_id: Mapped[str | None] = mapped_column(
        String, nullable=True, index=True
    )
    causation_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (Index("ix_outbox_status_created", "status", "created_at"),)
