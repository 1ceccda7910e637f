"""build_pipeline — construct the behavior chain."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..ports.behavior import IPipelineBehavior


def build_pipeline(
    behaviors: list[IPipelineBehavior],
    handler_fn: Callable[[Any], Any],
) -> Callable[[Any], Any]:
    """Build a nested behavior chain ending at *handler_fn*.

    The first behavior in the list is the **outermost** wrapper.
    Each behavior must implement: ``async def __call__(request, next_step)``.
    A new chain is built for every dispatch, so concurrent calls never share
    closures.
    """
    pipeline: Callable[[Any], Any] = handler_fn

    for behavior in reversed(behaviors):
        current_next = pipeline  # capture for closure

        async def _wrapper(
            request: Any,
            _behavior: IPipelineBehavior = behavior,
            _next: Callable[[Any], Any] = current_next,
        ) -> Any:
            return await _behavior(request, _next)

        pipeline = _wrapper

    return pipeline
