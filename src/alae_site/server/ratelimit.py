from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RateDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int

    def headers(self) -> list[tuple[str, str]]:
        return [
            ("RateLimit-Limit", str(self.limit)),
            ("RateLimit-Remaining", str(self.remaining)),
            ("RateLimit-Reset", str(self.reset_seconds)),
        ]


class FixedWindowLimiter:
    """Per-key request counter over fixed windows.

    Shared between request threads, so counters are guarded by a lock.
    Expired keys are swept at most once per window.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._max = max_requests
        self._window = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: dict[str, tuple[float, int]] = {}
        self._last_prune = clock()

    def hit(self, key: str) -> RateDecision:
        now = self._clock()
        with self._lock:
            start, count = self._hits.get(key, (now, 0))
            if now - start >= self._window:
                start, count = now, 0
            count += 1
            self._hits[key] = (start, count)
            if now - self._last_prune >= self._window:
                self._prune(now)
        reset = max(0, math.ceil(start + self._window - now))
        return RateDecision(
            allowed=count <= self._max,
            limit=self._max,
            remaining=max(0, self._max - count),
            reset_seconds=reset,
        )

    def _prune(self, now: float) -> None:
        expired = [k for k, (start, _) in self._hits.items() if now - start >= self._window]
        for k in expired:
            del self._hits[k]
        self._last_prune = now
