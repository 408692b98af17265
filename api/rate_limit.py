"""
In-process fixed-window rate limiter for the lookup endpoint.

Counts are per client key and per process; not shared across gateway instances.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

HEADER_LIMIT = "X-RateLimit-Limit"
HEADER_REMAINING = "X-RateLimit-Remaining"


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int

    def headers(self) -> dict[str, str]:
        return {HEADER_LIMIT: str(self.limit), HEADER_REMAINING: str(self.remaining)}


class FixedWindowRateLimiter:
    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}  # key -> (window_start, count)
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            window_start, count = self._windows.get(key, (now, 0))
            if count >= self.limit:
                return RateLimitResult(allowed=False, limit=self.limit, remaining=0)
            count += 1
            self._windows[key] = (window_start, count)
            return RateLimitResult(allowed=True, limit=self.limit, remaining=self.limit - count)

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._windows[key]
