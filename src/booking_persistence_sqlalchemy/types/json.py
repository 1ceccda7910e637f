from typing import Any

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, TypeDecorator


class JSONPayload(TypeDecorator[dict[str, Any]]):
    """
    JSON object column for event payloads.

    JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests). Only
    objects are stored; ``NULL`` reads back as an empty dict.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect: Any) -> Any:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value: Any, dialect: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise TypeError(f"Payload must be a JSON object, got {type(value).__name__}")
        return value

    def process_result_value(self, value: Any, dialect: Any) -> dict[str, Any]:
        return dict(value) if value else {}
