"""OutboxWorker — background polling loop around the OutboxProcessor."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from ...ports.background_worker import IBackgroundWorker

if TYPE_CHECKING:
    from .processor import OutboxProcessor

logger = logging.getLogger("booking.outbox")


class OutboxWorker(IBackgroundWorker):
    """
    Runs :meth:`OutboxProcessor.process_batch` on a fixed ``poll_interval``.

    A full batch is followed immediately by another one. :meth:`trigger`
    wakes the loop early, e.g. from a unit of work's ``on_commit`` hook.
    Errors are logged and the loop carries on after the next interval.

    Usage::

        worker = OutboxWorker(processor, poll_interval=1.0)
        await worker.start()
        ...
        await worker.stop()
    """

    def __init__(self, processor: OutboxProcessor, *, poll_interval: float = 1.0) -> None:
        self.processor = processor
        self.poll_interval = poll_interval

        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._trigger_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    def trigger(self) -> None:
        """Wake up the background loop to process entries."""
        self._trigger_event.set()

    # ── Worker Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Start the background processing loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "OutboxWorker started (batch: %d, poll: %.1fs)",
            self.processor.batch_size,
            self.poll_interval,
        )

    async def stop(self) -> None:
        """Stop the background loop gracefully."""
        self._running = False
        self.trigger()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("OutboxWorker stopped")

    # ── Internal loop ────────────────────────────────────────────────

    async def _run_loop(self) -> None:
        while self._running:
            try:
                processed = await self.processor.process_batch()
            except Exception as exc:
                logger.error("OutboxWorker loop error: %s", exc, exc_info=True)
                processed = 0

            if processed >= self.processor.batch_size:
                continue

            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(
                    self._trigger_event.wait(), timeout=self.poll_interval
                )
            self._trigger_event.clear()
