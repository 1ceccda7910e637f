"""CompositeValidator — chains multiple validators, collects all errors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .result import ValidationResult

if TYPE_CHECKING:
    from ..ports.validation import IValidator


class CompositeValidator:
    """Runs a list of validators and merges their results.

    Unlike fail-fast validation, this collects **all** errors across
    all validators before returning.

    Usage::

        validator = CompositeValidator([PydanticValidator(), seat_rules])
        result = await validator.validate(command)
    """

    def __init__(self, validators: list[IValidator] | None = None) -> None:
        self._validators: list[IValidator] = list(validators or [])

    def add(self, validator: IValidator) -> None:
        """Append a validator to the chain."""
        self._validators.append(validator)

    async def validate(self, request: Any) -> ValidationResult:
        """Run all validators and merge errors."""
        combined = ValidationResult.success()
        for validator in self._validators:
            result = await validator.validate(request)
            combined = combined.merge(result)
        return combined


class TypeRoutingValidator:
    """Dispatches to the validator registered for the request's exact type.

    Requests without a registered validator are valid.
    """

    def __init__(self, validators: dict[type[Any], IValidator] | None = None) -> None:
        self._validators: dict[type[Any], IValidator] = dict(validators or {})

    def register(self, request_type: type[Any], validator: IValidator) -> None:
        existing = self._validators.get(request_type)
        if existing is None:
            self._validators[request_type] = validator
        elif isinstance(existing, CompositeValidator):
            existing.add(validator)
        else:
            self._validators[request_type] = CompositeValidator([existing, validator])

    async def validate(self, request: Any) -> ValidationResult:
        validator = self._validators.get(type(request))
        if validator is None:
            return ValidationResult.success()
        return await validator.validate(request)
