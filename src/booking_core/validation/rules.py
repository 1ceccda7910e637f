"""RuleValidator — declarative per-field rules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .result import ValidationResult

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


@dataclass(frozen=True)
class Rule:
    """``check(value)`` must be truthy, else *message* is reported on *field*."""

    field: str
    check: Callable[[Any], bool]
    message: str

    def violated_by(self, request: Any) -> bool:
        try:
            return not self.check(getattr(request, self.field, None))
        except (TypeError, ValueError):
            return True


class RuleValidator:
    """Evaluates every rule against the request; never stops at the first failure.

    Usage::

        ReserveSeatValidator = RuleValidator([
            required("flight_id"),
            matches("seat_number", r"^[1-9][0-9]?[A-K]$", "must look like 12A"),
            Rule("expected_version", lambda v: v >= 0, "must not be negative"),
        ])
    """

    def __init__(self, rules: Iterable[Rule]) -> None:
        self._rules = list(rules)

    async def validate(self, request: Any) -> ValidationResult:
        result = ValidationResult.success()
        for rule in self._rules:
            if rule.violated_by(request):
                result.add_error(rule.field, rule.message)
        return result


def required(field_name: str, message: str = "is required") -> Rule:
    return Rule(field_name, lambda v: v is not None and str(v).strip() != "", message)


def matches(field_name: str, pattern: str, message: str) -> Rule:
    compiled = re.compile(pattern)

    def _check(value: Any) -> bool:
        return isinstance(value, str) and compiled.fullmatch(value) is not None

    return Rule(field_name, _check, message)


def optional_matches(field_name: str, pattern: str, message: str) -> Rule:
    compiled = re.compile(pattern)

    def _check(value: Any) -> bool:
        return value is None or (
            isinstance(value, str) and compiled.fullmatch(value) is not None
        )

    return Rule(field_name, _check, message)
