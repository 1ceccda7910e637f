"""BehaviorRegistry — declarative registration with ordering."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..ports.behavior import IPipelineBehavior

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BehaviorRegistration:
    behavior: IPipelineBehavior
    priority: int
    sequence: int


class BehaviorRegistry:
    """Collects behaviors and produces the chain order.

    Ordering rules:

    * lower ``priority`` runs first (outermost);
    * among equal priorities the **last registered** is outermost.

    The order is fixed once computed; registering again invalidates it.
    """

    def __init__(self) -> None:
        self._registrations: list[BehaviorRegistration] = []
        self._ordered: tuple[IPipelineBehavior, ...] | None = None  # cache

    # ── Registration ─────────────────────────────────────────────

    def register(self, behavior: IPipelineBehavior, *, priority: int = 0) -> None:
        """Register a behavior instance.

        Parameters
        ----------
        behavior:
            Any object implementing ``async __call__(request, next_step)``.
        priority:
            Lower = outermost in the chain.  Default ``0``.
        """
        self._registrations.append(
            BehaviorRegistration(
                behavior=behavior,
                priority=priority,
                sequence=len(self._registrations),
            )
        )
        self._ordered = None  # invalidate cache
        logger.debug(
            "Registered behavior %s (priority=%d)", type(behavior).__name__, priority
        )

    # ── Retrieval ────────────────────────────────────────────────

    def get_ordered_behaviors(self) -> list[IPipelineBehavior]:
        """Return behaviors outermost first."""
        if self._ordered is None:
            ordered = sorted(
                self._registrations, key=lambda r: (r.priority, -r.sequence)
            )
            self._ordered = tuple(r.behavior for r in ordered)
        return list(self._ordered)

    def __len__(self) -> int:
        return len(self._registrations)
