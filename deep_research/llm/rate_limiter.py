"""Sliding-window rate limiter for outbound LLM calls.

Guarantees that no more than `max_calls` calls begin within any rolling
`window_ms` interval. Unlike a fixed-bucket counter, the window is
recomputed from the recorded call timestamps on every attempt.

Usage::

    limiter = SlidingWindowRateLimiter(max_calls=9, window_ms=61_000)
    result = await limiter.schedule(lambda: llm.ainvoke(prompt))

    # or just wait for a slot before calling something yourself
    await limiter.acquire()
"""

import asyncio
import inspect
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional, TypeVar, Union

from deep_research.config import MAX_CALLS_PER_WINDOW, RATE_LIMIT_WINDOW_MS
from deep_research.llm.errors import RateLimiterInternalError
from deep_research.utils.logging import log, get_logger

MODULE = "llm.rate_limiter"
logger = get_logger()

T = TypeVar("T")


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class SlidingWindowRateLimiter:
    """Async sliding-window rate limiter.

    Checking the window and recording a call happen with no suspension in
    between, so under a single event loop no lock is needed. Waiting
    callers re-evaluate the window independently after their wait; the
    order among callers that wake together is not guaranteed.

    Args:
        max_calls: Calls allowed per window.
        window_ms: Window length in milliseconds.
        clock: Returns the current time in milliseconds.
        sleep: Async sleep taking seconds. Tests inject a fake together
            with `clock`.
    """

    def __init__(
        self,
        max_calls: int,
        window_ms: float,
        *,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ) -> None:
        if max_calls < 1:
            raise ValueError(f"max_calls must be at least 1, got {max_calls}")
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        self.max_calls = max_calls
        self.window_ms = window_ms
        self._clock = clock or _monotonic_ms
        self._sleep = sleep or asyncio.sleep
        self._calls: Deque[float] = deque()

    @property
    def calls(self) -> list[float]:
        """Timestamps of accepted calls still inside the window (as of the last prune)."""
        return list(self._calls)

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_ms
        while self._calls and self._calls[0] <= cutoff:
            self._calls.popleft()

    def _try_record(self) -> Optional[float]:
        """Record a call if a slot is free, else return the wait in ms."""
        now = self._clock()
        self._prune(now)

        if len(self._calls) > self.max_calls:
            raise RateLimiterInternalError(
                f"Call window holds {len(self._calls)} calls, limit is {self.max_calls}"
            )

        if len(self._calls) < self.max_calls:
            self._calls.append(now)
            return None

        return max(self._calls[0] + self.window_ms - now, 0.0)

    async def acquire(self) -> None:
        """Wait until a call slot is free and claim it."""
        waited_ms = 0.0
        while True:
            delay_ms = self._try_record()
            if delay_ms is None:
                break
            log.debug(logger, MODULE, "wait", "Rate limit reached, waiting for slot",
                      delay_ms=round(delay_ms), in_window=len(self._calls),
                      max_calls=self.max_calls)
            await self._sleep(delay_ms / 1000)
            waited_ms += delay_ms

        if waited_ms:
            log.debug(logger, MODULE, "slot_acquired", "Rate limit slot acquired",
                      waited_ms=round(waited_ms))

    async def schedule(self, task: Callable[[], Union[T, Awaitable[T]]]) -> T:
        """Run `task` once a slot is free and return its result.

        The task's exception propagates unchanged. Its slot stays recorded,
        since the call was attempted.
        """
        await self.acquire()
        result = task()
        if inspect.isawaitable(result):
            return await result
        return result


_default_limiter: Optional[SlidingWindowRateLimiter] = None


def get_default_limiter() -> SlidingWindowRateLimiter:
    """Get the process-wide limiter guarding the completion endpoint."""
    global _default_limiter
    if _default_limiter is None:
        _default_limiter = SlidingWindowRateLimiter(
            MAX_CALLS_PER_WINDOW, RATE_LIMIT_WINDOW_MS,
        )
        log.debug(logger, MODULE, "configured", "Default rate limiter created",
                  max_calls=MAX_CALLS_PER_WINDOW, window_ms=RATE_LIMIT_WINDOW_MS)
    return _default_limiter
