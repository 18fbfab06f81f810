"""Unit tests for the bounded queue and pipeline stats."""

from __future__ import annotations

import threading
import time

import pytest

from notion_rag.errors import QueueClosedError
from notion_rag.ingestion.channel import BoundedQueue
from notion_rag.ingestion.stats import Outcome, PipelineStats


class TestBoundedQueue:
    def test_fifo_order(self) -> None:
        q: BoundedQueue[int] = BoundedQueue(3)
        for i in range(3):
            q.put(i)
        assert [q.get(), q.get(), q.get()] == [0, 1, 2]

    def test_close_then_drain(self) -> None:
        """Items enqueued before close are still delivered; then iteration stops."""
        q: BoundedQueue[str] = BoundedQueue(4)
        q.put("a")
        q.put("b")
        q.close()
        assert list(q) == ["a", "b"]
        with pytest.raises(QueueClosedError):
            q.get()

    def test_put_after_close_raises(self) -> None:
        q: BoundedQueue[int] = BoundedQueue(1)
        q.close()
        with pytest.raises(QueueClosedError):
            q.put(1)

    def test_put_blocks_when_full(self) -> None:
        q: BoundedQueue[int] = BoundedQueue(1)
        q.put(1)
        done = threading.Event()

        def producer() -> None:
            q.put(2)
            done.set()

        t = threading.Thread(target=producer)
        t.start()
        assert not done.wait(0.1)  # blocked on the full queue
        assert q.get() == 1
        assert done.wait(1.0)
        assert q.get() == 2
        t.join()

    def test_close_wakes_blocked_reader(self) -> None:
        q: BoundedQueue[int] = BoundedQueue(1)
        outcome: list[str] = []

        def reader() -> None:
            outcome.extend(q)
            outcome.append("finished")

        t = threading.Thread(target=reader)
        t.start()
        time.sleep(0.05)
        q.close()
        t.join(1.0)
        assert not t.is_alive()
        assert outcome == ["finished"]

    def test_backpressure_loses_nothing(self) -> None:
        """A producer far ahead of its consumers blocks instead of dropping."""
        capacity, total = 2, 200
        q: BoundedQueue[int] = BoundedQueue(capacity)
        consumed: list[int] = []
        lock = threading.Lock()
        max_seen = 0

        def consumer() -> None:
            nonlocal max_seen
            for item in q:
                with lock:
                    consumed.append(item)
                    max_seen = max(max_seen, len(q))
                time.sleep(0.001)

        consumers = [threading.Thread(target=consumer) for _ in range(2)]
        for t in consumers:
            t.start()
        for i in range(total):
            q.put(i)
        q.close()
        for t in consumers:
            t.join(5.0)

        assert sorted(consumed) == list(range(total))
        assert max_seen <= capacity

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            BoundedQueue(0)


class TestPipelineStats:
    def test_snapshot_counts(self) -> None:
        stats = PipelineStats()
        stats.record(Outcome.SUCCEEDED)
        stats.record(Outcome.SUCCEEDED)
        stats.record(Outcome.FAILED)
        stats.record(Outcome.SKIPPED)
        snap = stats.snapshot()
        assert (snap.processed, snap.succeeded, snap.failed, snap.skipped) == (4, 2, 1, 1)

    def test_concurrent_records_are_not_lost(self) -> None:
        stats = PipelineStats()

        def hammer(outcome: Outcome) -> None:
            for _ in range(1000):
                stats.record(outcome)

        threads = [threading.Thread(target=hammer, args=(o,)) for o in Outcome for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        snap = stats.snapshot()
        assert snap.processed == 9000
        assert snap.processed == snap.succeeded + snap.failed + snap.skipped
