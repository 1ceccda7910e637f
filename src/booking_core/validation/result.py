"""ValidationResult — structured validation errors."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..primitives.exceptions import ValidationError, Violation


def default_violations_factory() -> list[Violation]:
    """Factory for mutable default list in ValidationResult dataclass fields."""
    return []


@dataclass
class ValidationResult:
    """Collects every validation violation found for a request.

    Usage::

        result = ValidationResult.success()
        result = ValidationResult.failure({"seat_number": ["is required"]})
    """

    violations: list[Violation] = field(default_factory=default_violations_factory)

    @property
    def is_valid(self) -> bool:
        return len(self.violations) == 0

    @property
    def errors(self) -> dict[str, list[str]]:
        """Messages grouped by field name."""
        grouped: dict[str, list[str]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.field, []).append(violation.message)
        return grouped

    # ── Factory methods ──────────────────────────────────────────

    @classmethod
    def success(cls) -> ValidationResult:
        return cls()

    @classmethod
    def failure(cls, errors: dict[str, list[str]]) -> ValidationResult:
        return cls(
            violations=[
                Violation(field_name, message)
                for field_name, messages in errors.items()
                for message in messages
            ]
        )

    # ── Merging ──────────────────────────────────────────────────

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Return a new result holding the violations of both."""
        return ValidationResult(violations=[*self.violations, *other.violations])

    def add_error(self, field_name: str, message: str) -> None:
        """Add a single violation for *field_name*."""
        self.violations.append(Violation(field_name, message))

    def raise_if_invalid(self) -> None:
        if not self.is_valid:
            raise ValidationError(list(self.violations))

    def __bool__(self) -> bool:
        return self.is_valid
