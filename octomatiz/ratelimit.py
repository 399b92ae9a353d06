"""In-memory fixed-window rate limiting.

State is process-local: each worker process keeps its own counters.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

# Prune expired windows once the table grows past this many keys
MAX_TRACKED_KEYS = 10_000


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate limit check."""

    allowed: bool
    remaining: int
    reset_in_ms: int

    @property
    def retry_after_seconds(self) -> int:
        """Seconds until the window resets, rounded up."""
        return max(1, -(-self.reset_in_ms // 1000))


@dataclass
class _Window:
    count: int
    reset_at_ms: int


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


class RateLimiter:
    """Count requests per key within fixed time windows.

    Args:
        clock: Millisecond clock, injectable for tests.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def check(self, key: str, limit: int, window_ms: int) -> RateLimitDecision:
        """Count one request for ``key`` and decide whether it is allowed.

        Args:
            key: Request identity (e.g. client IP plus endpoint).
            limit: Maximum requests per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitDecision for this request.
        """
        now = self._clock()
        with self._lock:
            if len(self._windows) > MAX_TRACKED_KEYS:
                self._prune(now)

            window = self._windows.get(key)
            if window is None or window.reset_at_ms <= now:
                self._windows[key] = _Window(count=1, reset_at_ms=now + window_ms)
                return RateLimitDecision(
                    allowed=True, remaining=limit - 1, reset_in_ms=window_ms
                )

            reset_in = window.reset_at_ms - now
            if window.count >= limit:
                return RateLimitDecision(allowed=False, remaining=0, reset_in_ms=reset_in)

            window.count += 1
            return RateLimitDecision(
                allowed=True, remaining=limit - window.count, reset_in_ms=reset_in
            )

    def _prune(self, now: int) -> None:
        expired = [k for k, w in self._windows.items() if w.reset_at_ms <= now]
        for k in expired:
            del self._windows[k]


def client_ip(headers: Mapping[str, str], fallback: str | None = None) -> str:
    """Return the client IP of a request from proxy headers.

    Checks ``cf-connecting-ip``, the first ``x-forwarded-for`` hop and
    ``x-real-ip`` in that order.
    """
    ip = headers.get("cf-connecting-ip")
    if ip:
        return ip
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return headers.get("x-real-ip") or fallback or "unknown"


__all__ = ["RateLimitDecision", "RateLimiter", "client_ip"]
