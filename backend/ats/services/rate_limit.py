"""
Fixed-Window Rate Limiter (admission control)

Each client address gets a counter that resets when its window elapses:
with the default 100 requests / 15 minutes, request 101 inside the same
window is rejected and the client learns how many seconds remain.

The counters live in process memory; a single API process is assumed.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from fastapi import Request

from ats.errors import RateLimitExceeded
from ats.middleware.metrics import record_admission_rejection

logger = logging.getLogger(__name__)


@dataclass
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_after: int


class FixedWindowRateLimiter:
    """
    Counts hits per key inside fixed windows.

    Args:
        limit: Requests allowed per window
        window_seconds: Window length
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        limit: int = 100,
        window_seconds: int = 900,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._last_prune = clock()

    def _prune(self, now: float) -> None:
        if now - self._last_prune < self.window_seconds:
            return
        expired = [
            key for key, (start, _) in self._windows.items()
            if now - start >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_prune = now

    def hit(self, key: str) -> RateLimitDecision:
        """Record one request for key and decide whether to admit it."""
        now = self.clock()
        self._prune(now)

        start, count = self._windows.get(key, (now, 0))
        if now - start >= self.window_seconds:
            start, count = now, 0

        reset_after = max(1, int(round(start + self.window_seconds - now)))

        if count >= self.limit:
            return RateLimitDecision(allowed=False, remaining=0, reset_after=reset_after)

        count += 1
        self._windows[key] = (start, count)
        return RateLimitDecision(allowed=True, remaining=self.limit - count, reset_after=reset_after)

    def reset(self) -> None:
        self._windows.clear()


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def enforce_rate_limit(request: Request) -> None:
    """Router dependency: first interceptor of every /api request."""
    limiter: FixedWindowRateLimiter = request.app.state.rate_limiter
    key = client_key(request)
    decision = limiter.hit(key)
    if not decision.allowed:
        record_admission_rejection()
        logger.info(f"Rate limit exceeded for {key}")
        raise RateLimitExceeded(retry_after=decision.reset_after)
