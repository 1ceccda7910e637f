"""PydanticValidator — leverages Pydantic model validation."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .result import ValidationResult


class PydanticValidator:
    """Validates requests using Pydantic model validation.

    Re-validates the request data through its model class and converts
    every reported error into a violation. Catches requests built with
    ``model_construct`` or mutated around validation.
    """

    async def validate(self, request: Any) -> ValidationResult:
        if not hasattr(request, "model_validate"):
            return ValidationResult.success()

        try:
            type(request).model_validate(request.model_dump())
            return ValidationResult.success()
        except PydanticValidationError as exc:
            result = ValidationResult.success()
            for error in exc.errors():
                loc = ".".join(str(p) for p in error.get("loc", ("__root__",)))
                result.add_error(loc, error.get("msg", "validation error"))
            return result
