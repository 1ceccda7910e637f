"""IPipelineBehavior — wrapper around handler invocation."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@runtime_checkable
class IPipelineBehavior(Protocol):
    """Protocol for behaviors in the command/query pipeline.

    A behavior wraps handler invocation and can inspect the request,
    short-circuit execution, or post-process the result or error.
    ``behaviors[0]`` is the **outermost** wrapper.
    """

    async def __call__(
        self,
        request: Any,
        next_step: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        """Run behavior logic and call *next_step* to proceed.

        Parameters
        ----------
        request:
            The incoming command or query.
        next_step:
            Async callable representing the rest of the pipeline.

        Returns
        -------
        The result from the inner chain.
        """
        ...
