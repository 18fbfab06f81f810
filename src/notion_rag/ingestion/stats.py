"""Pipeline counters shared by the embedding workers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StatsSnapshot:
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0

    def __str__(self) -> str:
        return (
            f"processed {self.processed} "
            f"(succeeded: {self.succeeded}, failed: {self.failed}, skipped: {self.skipped})"
        )


class PipelineStats:
    """Monotonic outcome counters.

    Workers only call :meth:`record`, which bumps the outcome counter and
    ``processed`` together under one lock, so every snapshot satisfies
    ``processed == succeeded + failed + skipped``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts = {outcome: 0 for outcome in Outcome}

    def record(self, outcome: Outcome) -> None:
        with self._lock:
            self._counts[outcome] += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            counts = dict(self._counts)
        return StatsSnapshot(
            processed=sum(counts.values()),
            succeeded=counts[Outcome.SUCCEEDED],
            failed=counts[Outcome.FAILED],
            skipped=counts[Outcome.SKIPPED],
        )
