"""Bounded retry for remote calls that may hit rate limits.

Errors are classified by message: anything mentioning a rate limit, a
quota, or resource exhaustion is *transient* and retried after a fixed
delay; everything else is *fatal* and raised on the first attempt.

Usage::

    caller = RateLimitedCaller(max_retries=3, retry_delay=30)
    vector = caller.call(lambda: client.embed_query(text))
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from notion_rag.config import settings
from notion_rag.errors import MaxRetriesExceededError, RemoteCallError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_MARKERS: tuple[str, ...] = (
    "429",
    "rate limit",
    "ratelimit",
    "quota",
    "resource exhausted",
    "resource_exhausted",
    "too many requests",
)


def is_transient_error(exc: BaseException) -> bool:
    """Return ``True`` when *exc* looks like a rate-limit / quota error."""
    message = str(exc).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


@dataclass(frozen=True)
class RetryEvent:
    """Notification emitted before each retry wait.

    Attributes
    ----------
    attempt:
        The attempt number that just failed (1-based).
    max_attempts:
        Total number of attempts allowed.
    delay:
        Seconds the caller will wait before the next attempt.
    error:
        Message of the transient error that triggered the retry.
    """

    attempt: int
    max_attempts: int
    delay: float
    error: str


RetryCallback = Callable[[RetryEvent], None]


class RateLimitedCaller:
    """Invoke zero-argument remote operations with bounded retries.

    Parameters
    ----------
    max_retries:
        Total number of attempts, including the first one.
    retry_delay:
        Fixed wait in seconds between attempts.
    on_retry:
        Optional callback receiving a :class:`RetryEvent` before each
        wait.  It must return quickly; exceptions it raises are logged
        and ignored.
    name:
        Label used in log lines and error messages.
    sleep:
        Wait function, injectable for tests.

    The wait happens on the calling thread only.  Callers must not hold
    shared locks while calling :meth:`call`.
    """

    def __init__(
        self,
        *,
        max_retries: int = settings.max_retries,
        retry_delay: float = settings.retry_delay,
        on_retry: RetryCallback | None = None,
        name: str = "remote",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.on_retry = on_retry
        self.name = name
        self._sleep = sleep

    def call(self, operation: Callable[[], T]) -> T:
        """Run *operation*, retrying transient failures.

        Raises
        ------
        MaxRetriesExceededError
            Every attempt failed with a transient error.
        RemoteCallError
            The operation failed with a non-transient error.
        """
        retrying = Retrying(
            retry=retry_if_exception(is_transient_error),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_fixed(self.retry_delay),
            sleep=self._sleep,
            before_sleep=self._before_sleep,
        )
        try:
            return retrying(operation)
        except RetryError as exc:
            last = exc.last_attempt.exception()
            raise MaxRetriesExceededError(
                f"{self.name}: max retries exceeded ({self.max_retries} attempts): {last}",
                attempts=self.max_retries,
            ) from last
        except Exception as exc:
            raise RemoteCallError(f"{self.name} call failed: {exc}") from exc

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        event = RetryEvent(
            attempt=retry_state.attempt_number,
            max_attempts=self.max_retries,
            delay=self.retry_delay,
            error=str(error),
        )
        logger.warning(
            "%s rate limited (attempt %d/%d), retrying in %.1fs: %s",
            self.name,
            event.attempt,
            event.max_attempts,
            event.delay,
            event.error,
        )
        if self.on_retry is None:
            return
        try:
            self.on_retry(event)
        except Exception:
            logger.warning("Retry notification failed", exc_info=True)
