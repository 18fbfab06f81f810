"""Bounded blocking queue with an explicit close-then-drain contract.

:meth:`BoundedQueue.put` blocks while the queue is full; that is the
backpressure a slow consumer pool applies to the producer.  Closing the
queue is the single "no more work" signal: readers keep receiving what
was already enqueued and get :class:`QueueClosedError` once it is drained.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Generic, Iterator, TypeVar

from notion_rag.errors import QueueClosedError

T = TypeVar("T")


class BoundedQueue(Generic[T]):
    """Thread-safe FIFO with a fixed capacity."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: Deque[T] = deque()
        self._closed = False
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    def put(self, item: T) -> None:
        """Append *item*, blocking while the queue is full.

        Raises
        ------
        QueueClosedError
            The queue is (or becomes, while waiting) closed.
        """
        with self._not_full:
            while len(self._items) >= self.capacity and not self._closed:
                self._not_full.wait()
            if self._closed:
                raise QueueClosedError("put on a closed queue")
            self._items.append(item)
            self._not_empty.notify()

    def get(self) -> T:
        """Remove and return the oldest item, blocking while empty and open.

        Raises
        ------
        QueueClosedError
            The queue is closed and has no items left.
        """
        with self._not_empty:
            while not self._items and not self._closed:
                self._not_empty.wait()
            if not self._items:
                raise QueueClosedError("queue is closed and drained")
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def close(self) -> None:
        """Stop accepting items and wake every waiter.  Idempotent."""
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[T]:
        """Yield items until the queue is closed and drained."""
        while True:
            try:
                yield self.get()
            except QueueClosedError:
                return
