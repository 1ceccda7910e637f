"""Validation system: results, rules, composite and pydantic validators."""

from __future__ import annotations

from .composite import CompositeValidator, TypeRoutingValidator
from .pydantic import PydanticValidator
from .result import ValidationResult
from .rules import Rule, RuleValidator, matches, optional_matches, required

__all__ = [
    "CompositeValidator",
    "PydanticValidator",
    "Rule",
    "RuleValidator",
    "TypeRoutingValidator",
    "ValidationResult",
    "matches",
    "optional_matches",
    "required",
]
