"""IValidator — composable request-validation protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..validation.result import ValidationResult


@runtime_checkable
class IValidator(Protocol):
    """Protocol for request validators.

    Validators are composable via
    :class:`~booking_core.validation.composite.CompositeValidator`.
    """

    async def validate(self, request: Any) -> ValidationResult:
        """Validate *request* and return a
        :class:`~booking_core.validation.result.ValidationResult`.

        Must report every violation it finds, not just the first.
        """
        ...
