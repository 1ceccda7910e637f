"""Tests for the Outbox package — processor, worker."""

from __future__ import annotations

import asyncio
from collections import Counter
from datetime import timedelta
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from booking_core.adapters.memory import InMemoryDatabase, InMemoryOutboxStore
from booking_core.config import OutboxSettings
from booking_core.cqrs.outbox import OutboxProcessor, OutboxWorker
from booking_core.ports.background_worker import IBackgroundWorker
from booking_core.ports.outbox import OutboxEntry, OutboxStatus
from booking_core.primitives.retry import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from conftest import FakeClock

# ═══════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════

NO_BACKOFF = RetryPolicy(max_attempts=5, base_delay=0, max_delay=0, jitter=False)


def _make_publisher(side_effect: Any = None) -> AsyncMock:
    pub = AsyncMock()
    pub.publish = AsyncMock(side_effect=side_effect)
    return pub


def _entry(event_type: str = "SeatReserved", **kwargs: Any) -> OutboxEntry:
    return OutboxEntry(
        aggregate_id="FL100/12A",
        aggregate_type="SeatReservation",
        event_type=event_type,
        payload={"flight_id": "FL100", "seat_number": "12A"},
        correlation_id="corr-1",
        causation_id="cmd-1",
        **kwargs,
    )


class YieldingPublisher:
    """Publisher that hands control back to the loop on every publish."""

    def __init__(self) -> None:
        self.message_ids: list[str] = []

    async def publish(self, topic: str, message: Any, **kwargs: Any) -> None:
        await asyncio.sleep(0)
        self.message_ids.append(kwargs["message_id"])


class GatedPublisher:
    """Publisher that blocks inside ``publish`` until released."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def publish(self, topic: str, message: Any, **kwargs: Any) -> None:
        self.entered.set()
        await self.release.wait()
        if self.error is not None:
            raise self.error


# ═══════════════════════════════════════════════════════════════════════
# OutboxProcessor tests
# ═══════════════════════════════════════════════════════════════════════


class TestOutboxProcessor:
    @pytest.mark.asyncio
    async def test_process_batch_publishes_pending(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        publisher = _make_publisher()
        processor = OutboxProcessor(outbox_store, publisher, clock=clock)
        entry = _entry()
        await commit_entries(entry)

        count = await processor.process_batch()

        assert count == 1
        publisher.publish.assert_awaited_once_with(
            "SeatReserved",
            {"flight_id": "FL100", "seat_number": "12A"},
            message_id=entry.entry_id,
            event_type="SeatReserved",
            correlation_id="corr-1",
            causation_id="cmd-1",
            attempt=1,
        )
        stored = await outbox_store.get(entry.entry_id)
        assert stored is not None
        assert stored.status is OutboxStatus.PUBLISHED
        assert stored.attempt_count == 1

    @pytest.mark.asyncio
    async def test_process_batch_empty(self, outbox_store: InMemoryOutboxStore) -> None:
        publisher = _make_publisher()
        processor = OutboxProcessor(outbox_store, publisher)

        assert await processor.process_batch() == 0
        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_topic_resolver_picks_routing_key(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        publisher = _make_publisher()
        processor = OutboxProcessor(
            outbox_store,
            publisher,
            topic_resolver=lambda event_type: f"seats.{event_type}",
            clock=clock,
        )
        await commit_entries(_entry())

        await processor.process_batch()

        assert publisher.publish.call_args[0][0] == "seats.SeatReserved"

    @pytest.mark.asyncio
    async def test_batch_size_limits_one_pass(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        publisher = _make_publisher()
        processor = OutboxProcessor(outbox_store, publisher, batch_size=2, clock=clock)
        await commit_entries(*(_entry() for _ in range(5)))

        assert await processor.process_batch() == 2
        assert await processor.process_batch() == 2
        assert await processor.process_batch() == 1
        assert await processor.process_batch() == 0

    @pytest.mark.asyncio
    async def test_transient_failures_retry_then_publish_once(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        publisher = _make_publisher(
            side_effect=[ConnectionError("down"), ConnectionError("down"), None]
        )
        processor = OutboxProcessor(
            outbox_store, publisher, retry_policy=NO_BACKOFF, clock=clock
        )
        entry = _entry()
        await commit_entries(entry)

        results = [await processor.process_batch() for _ in range(4)]

        assert results == [0, 0, 1, 0]
        assert publisher.publish.await_count == 3
        attempts = [c.kwargs["attempt"] for c in publisher.publish.await_args_list]
        assert attempts == [1, 2, 3]
        stored = await outbox_store.get(entry.entry_id)
        assert stored is not None
        assert stored.status is OutboxStatus.PUBLISHED
        assert stored.attempt_count == 3
        assert stored.last_error == "ConnectionError: down"

    @pytest.mark.asyncio
    async def test_backoff_defers_next_attempt(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        publisher = _make_publisher(side_effect=[ConnectionError("down"), None])
        policy = RetryPolicy(max_attempts=3, base_delay=10, max_delay=60, jitter=False)
        processor = OutboxProcessor(
            outbox_store, publisher, retry_policy=policy, clock=clock
        )
        entry = _entry()
        await commit_entries(entry)

        assert await processor.process_batch() == 0
        stored = await outbox_store.get(entry.entry_id)
        assert stored is not None
        assert stored.next_attempt_at == clock.now + timedelta(seconds=10)

        clock.advance(5)
        assert await processor.process_batch() == 0
        assert publisher.publish.await_count == 1

        clock.advance(6)
        assert await processor.process_batch() == 1
        assert publisher.publish.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_move_entry_to_failed(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        error = ConnectionError("broker gone")
        publisher = _make_publisher(side_effect=error)
        on_dead_letter = AsyncMock()
        processor = OutboxProcessor(
            outbox_store,
            publisher,
            retry_policy=RetryPolicy(
                max_attempts=2, base_delay=0, max_delay=0, jitter=False
            ),
            on_dead_letter=on_dead_letter,
            clock=clock,
        )
        entry = _entry()
        await commit_entries(entry)

        await processor.process_batch()
        on_dead_letter.assert_not_awaited()
        await processor.process_batch()
        await processor.process_batch()

        assert publisher.publish.await_count == 2
        failed = await outbox_store.fetch_failed()
        assert [e.entry_id for e in failed] == [entry.entry_id]
        assert failed[0].attempt_count == 2
        on_dead_letter.assert_awaited_once()
        dead_entry, exc = on_dead_letter.await_args.args
        assert dead_entry.entry_id == entry.entry_id
        assert dead_entry.status is OutboxStatus.FAILED
        assert exc is error

    @pytest.mark.asyncio
    async def test_dead_letter_callback_failure_is_contained(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        processor = OutboxProcessor(
            outbox_store,
            _make_publisher(side_effect=ConnectionError("down")),
            retry_policy=RetryPolicy(max_attempts=1, base_delay=0, max_delay=0),
            on_dead_letter=AsyncMock(side_effect=RuntimeError("dlq down")),
            clock=clock,
        )
        entry = _entry()
        await commit_entries(entry)

        assert await processor.process_batch() == 0

        stored = await outbox_store.get(entry.entry_id)
        assert stored is not None
        assert stored.status is OutboxStatus.FAILED

    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_the_batch(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        first, second = _entry("SeatCreated"), _entry("SeatReserved")
        first.created_at = clock.now - timedelta(seconds=1)
        await commit_entries(first, second)

        async def publish(topic: str, message: Any, **kwargs: Any) -> None:
            if topic == "SeatCreated":
                raise ConnectionError("down")

        processor = OutboxProcessor(
            outbox_store,
            _make_publisher(side_effect=publish),
            retry_policy=NO_BACKOFF,
            clock=clock,
        )

        assert await processor.process_batch() == 1
        stored = await outbox_store.get(second.entry_id)
        assert stored is not None
        assert stored.status is OutboxStatus.PUBLISHED

    @pytest.mark.asyncio
    async def test_competing_processors_publish_each_entry_once(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        entries = [_entry() for _ in range(10)]
        await commit_entries(*entries)
        publisher = YieldingPublisher()
        processors = [
            OutboxProcessor(outbox_store, publisher, clock=clock) for _ in range(3)
        ]

        counts = await asyncio.gather(*(p.process_batch() for p in processors))

        assert sum(counts) == 10
        assert Counter(publisher.message_ids) == Counter(
            e.entry_id for e in entries
        )
        assert await outbox_store.fetch_pending() == []

    @pytest.mark.asyncio
    async def test_expired_claim_is_picked_up(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        entry = _entry()
        await commit_entries(entry)
        # A processor that claimed the entry and then died.
        await outbox_store.claim(
            entry.entry_id, "crashed", clock.now + timedelta(seconds=30), clock.now
        )
        publisher = _make_publisher()
        processor = OutboxProcessor(outbox_store, publisher, clock=clock)

        assert await processor.process_batch() == 0
        clock.advance(31)
        assert await processor.process_batch() == 1
        publisher.publish.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_after_lease_takeover_keeps_new_claim(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        entry = _entry()
        await commit_entries(entry)
        slow = GatedPublisher(error=ConnectionError("broker gone"))
        current = GatedPublisher()
        late = OutboxProcessor(outbox_store, slow, claim_ttl=30, clock=clock)
        owner = OutboxProcessor(outbox_store, current, claim_ttl=30, clock=clock)

        late_run = asyncio.create_task(late.process_batch())
        await slow.entered.wait()
        clock.advance(31)
        owner_run = asyncio.create_task(owner.process_batch())
        await current.entered.wait()

        slow.release.set()
        assert await late_run == 0

        held = await outbox_store.get(entry.entry_id)
        assert held is not None
        assert held.claim_token is not None
        assert held.attempt_count == 0
        assert held.last_error is None

        third = _make_publisher()
        bystander = OutboxProcessor(outbox_store, third, clock=clock)
        assert await bystander.process_batch() == 0
        third.publish.assert_not_awaited()

        current.release.set()
        assert await owner_run == 1
        stored = await outbox_store.get(entry.entry_id)
        assert stored is not None
        assert stored.status is OutboxStatus.PUBLISHED
        assert stored.attempt_count == 1

    @pytest.mark.asyncio
    async def test_late_acknowledgement_does_not_finish_taken_over_entry(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        entry = _entry()
        await commit_entries(entry)
        slow = GatedPublisher()
        current = GatedPublisher()
        late = OutboxProcessor(outbox_store, slow, claim_ttl=30, clock=clock)
        owner = OutboxProcessor(outbox_store, current, claim_ttl=30, clock=clock)

        late_run = asyncio.create_task(late.process_batch())
        await slow.entered.wait()
        clock.advance(31)
        owner_run = asyncio.create_task(owner.process_batch())
        await current.entered.wait()

        slow.release.set()
        assert await late_run == 1
        held = await outbox_store.get(entry.entry_id)
        assert held is not None
        assert held.status is OutboxStatus.PENDING
        assert held.claim_token is not None

        current.release.set()
        await owner_run
        stored = await outbox_store.get(entry.entry_id)
        assert stored is not None
        assert stored.status is OutboxStatus.PUBLISHED
        assert stored.attempt_count == 1

    @pytest.mark.asyncio
    async def test_settle_delay_skips_fresh_entries(
        self,
        outbox_store: InMemoryOutboxStore,
        commit_entries: Callable[..., Awaitable[None]],
        clock: FakeClock,
    ) -> None:
        entry = _entry(created_at=clock.now)
        await commit_entries(entry)
        processor = OutboxProcessor(
            outbox_store, _make_publisher(), settle_delay=60, clock=clock
        )

        assert await processor.process_batch() == 0
        clock.advance(61)
        assert await processor.process_batch() == 1

    def test_from_settings(self, outbox_store: InMemoryOutboxStore) -> None:
        settings = OutboxSettings(
            batch_size=7, claim_ttl=12, max_attempts=9, settle_delay=2
        )

        processor = OutboxProcessor.from_settings(
            outbox_store, _make_publisher(), settings
        )

        assert processor.batch_size == 7
        assert processor.claim_ttl == 12
        assert processor.settle_delay == 2
        assert processor.retry_policy.max_attempts == 9


# ═══════════════════════════════════════════════════════════════════════
# OutboxWorker tests
# ═══════════════════════════════════════════════════════════════════════


async def _eventually(condition: Callable[[], bool], timeout: float = 2.0) -> None:
    async def _wait() -> None:
        while not condition():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_wait(), timeout)


class TestOutboxWorker:
    @pytest.mark.asyncio
    async def test_worker_publishes_committed_entries(
        self,
        database: InMemoryDatabase,
        commit_entries: Callable[..., Awaitable[None]],
    ) -> None:
        store = InMemoryOutboxStore(database)
        publisher = _make_publisher()
        worker = OutboxWorker(OutboxProcessor(store, publisher), poll_interval=0.01)
        await worker.start()
        try:
            assert isinstance(worker, IBackgroundWorker)
            assert worker.is_running
            await commit_entries(_entry(), _entry())
            await _eventually(lambda: publisher.publish.await_count == 2)
        finally:
            await worker.stop()

        assert not worker.is_running
        assert await store.fetch_pending() == []

    @pytest.mark.asyncio
    async def test_trigger_wakes_idle_worker(
        self,
        database: InMemoryDatabase,
        commit_entries: Callable[..., Awaitable[None]],
    ) -> None:
        store = InMemoryOutboxStore(database)
        publisher = _make_publisher()
        worker = OutboxWorker(OutboxProcessor(store, publisher), poll_interval=60)
        await worker.start()
        try:
            await asyncio.sleep(0.01)
            await commit_entries(_entry())
            worker.trigger()
            await _eventually(lambda: publisher.publish.await_count == 1)
        finally:
            await worker.stop()

    @pytest.mark.asyncio
    async def test_loop_survives_processor_errors(self) -> None:
        calls: list[int] = []

        async def process_batch() -> int:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("db down")
            return 0

        processor = MagicMock()
        processor.batch_size = 10
        processor.process_batch = AsyncMock(side_effect=process_batch)
        worker = OutboxWorker(processor, poll_interval=0.01)

        await worker.start()
        try:
            await _eventually(lambda: processor.process_batch.await_count >= 3)
        finally:
            await worker.stop()

    @pytest.mark.asyncio
    async def test_start_and_stop_are_idempotent(
        self, outbox_store: InMemoryOutboxStore
    ) -> None:
        worker = OutboxWorker(
            OutboxProcessor(outbox_store, _make_publisher()), poll_interval=0.01
        )

        await worker.start()
        await worker.start()
        await worker.stop()
        await worker.stop()

        assert not worker.is_running
