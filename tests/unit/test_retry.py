"""Unit tests for the rate-limited remote caller."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from notion_rag.errors import MaxRetriesExceededError, RemoteCallError
from notion_rag.remote.retry import RateLimitedCaller, RetryEvent, is_transient_error


class _Flaky:
    """Fails with *error* for the first *failures* calls, then returns *result*."""

    def __init__(self, failures: int, error: Exception, result: str = "ok") -> None:
        self.failures = failures
        self.error = error
        self.result = result
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def caller(sleeps: list[float]) -> RateLimitedCaller:
    return RateLimitedCaller(max_retries=3, retry_delay=30.0, sleep=sleeps.append, name="test")


class TestIsTransientError:
    @pytest.mark.parametrize(
        "message",
        [
            "googleapi: Error 429: Too Many Requests",
            "Rate limit reached for requests",
            "Quota exceeded for quota metric",
            "RESOURCE_EXHAUSTED: out of capacity",
            "resource exhausted",
        ],
    )
    def test_transient_messages(self, message: str) -> None:
        assert is_transient_error(RuntimeError(message))

    @pytest.mark.parametrize("message", ["invalid api key", "400 Bad Request", "connection reset"])
    def test_fatal_messages(self, message: str) -> None:
        assert not is_transient_error(RuntimeError(message))


class TestRateLimitedCaller:
    def test_success_first_try(self, caller: RateLimitedCaller, sleeps: list[float]) -> None:
        assert caller.call(lambda: 42) == 42
        assert sleeps == []

    @pytest.mark.parametrize("failures", [1, 2])
    def test_transient_then_success(self, caller: RateLimitedCaller, sleeps: list[float], failures: int) -> None:
        op = _Flaky(failures, RuntimeError("429 rate limit"))
        assert caller.call(op) == "ok"
        assert op.calls == failures + 1
        assert sleeps == [30.0] * failures

    def test_always_transient_exhausts_retries(self, caller: RateLimitedCaller, sleeps: list[float]) -> None:
        op = _Flaky(10, RuntimeError("quota exceeded"))
        with pytest.raises(MaxRetriesExceededError, match="max retries") as exc_info:
            caller.call(op)
        assert op.calls == 3
        assert len(sleeps) == 2
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_fatal_error_not_retried(self, caller: RateLimitedCaller, sleeps: list[float]) -> None:
        op = _Flaky(10, ValueError("permission denied"))
        with pytest.raises(RemoteCallError) as exc_info:
            caller.call(op)
        assert not isinstance(exc_info.value, MaxRetriesExceededError)
        assert op.calls == 1
        assert sleeps == []
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_retry_notifications(self, sleeps: list[float]) -> None:
        events: list[RetryEvent] = []
        caller = RateLimitedCaller(max_retries=3, retry_delay=5.0, sleep=sleeps.append, on_retry=events.append)
        caller.call(_Flaky(2, RuntimeError("429")))
        assert [(e.attempt, e.max_attempts, e.delay) for e in events] == [(1, 3, 5.0), (2, 3, 5.0)]
        assert "429" in events[0].error

    def test_broken_notifier_does_not_break_retry(self, sleeps: list[float]) -> None:
        notifier = MagicMock(side_effect=RuntimeError("sink down"))
        caller = RateLimitedCaller(max_retries=2, retry_delay=1.0, sleep=sleeps.append, on_retry=notifier)
        assert caller.call(_Flaky(1, RuntimeError("rate limit"))) == "ok"
        notifier.assert_called_once()

    def test_invalid_max_retries(self) -> None:
        with pytest.raises(ValueError):
            RateLimitedCaller(max_retries=0)
