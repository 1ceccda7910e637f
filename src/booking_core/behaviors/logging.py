"""LoggingBehavior — logs request execution details."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import BookingCoreError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("booking.behaviors")


class LoggingBehavior:
    """Logs request execution — name, duration, correlation_id.

    Expected business failures (typed core errors) are logged at WARNING
    without a traceback; anything else gets a full ``logger.exception``.
    """

    async def __call__(
        self,
        request: Any,
        next_step: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        request_name = type(request).__name__
        correlation_id = getattr(request, "correlation_id", None)
        logger.info(
            "Handling %s (correlation_id=%s)",
            request_name,
            correlation_id,
        )
        start = time.perf_counter()
        try:
            result = await next_step(request)
        except BookingCoreError as exc:
            elapsed = (time.perf_counter() - start) * 1000
            logger.warning(
                "%s rejected after %.2fms: %s: %s",
                request_name,
                elapsed,
                type(exc).__name__,
                exc,
            )
            raise
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception("%s failed after %.2fms", request_name, elapsed)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        logger.info("%s completed in %.2fms", request_name, elapsed)
        return result
