"""Seat repositories: in-memory, and SQLAlchemy (``booking_seats.adapters.sql``).

The SQLAlchemy module is not imported here so the in-memory setup works
without the ``sqlalchemy`` extra.
"""

from .memory import InMemorySeatRepository

__all__ = ["InMemorySeatRepository"]
