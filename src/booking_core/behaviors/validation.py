"""ValidationBehavior — validates requests before execution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..ports.validation import IValidator

logger = logging.getLogger("booking.behaviors")


class ValidationBehavior:
    """Runs ``IValidator.validate()`` before the inner chain.

    If any rule fails, raises one ValidationError carrying every violation;
    the handler is never invoked.
    """

    def __init__(self, validator: IValidator) -> None:
        self._validator = validator

    async def __call__(
        self,
        request: Any,
        next_step: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        result = await self._validator.validate(request)
        if not result.is_valid:
            logger.debug(
                "%s failed validation with %d violation(s)",
                type(request).__name__,
                len(result.violations),
            )
            raise ValidationError(list(result.violations))
        return await next_step(request)
