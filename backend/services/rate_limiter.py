"""
In-process fixed-window rate limiter.

Buckets live in memory, keyed by identity (client address plus endpoint
name). A window opens on the first request after the previous one expired
and admits `limit` requests until `reset_at`. State is lost on restart and
is not shared between processes.
"""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitBucket:
    """Request count for one identity within the current window."""
    count: int
    reset_at: int


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate-limit check."""
    allowed: bool
    remaining: int
    reset_at: int


class RateLimiter:
    """
    Fixed-window counter store.

    The check-and-increment for a key runs under a lock so concurrent
    requests can never admit more than `limit` calls per window.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        """
        Args:
            clock: Returns the current time in epoch milliseconds. Defaults to wall time.
        """
        self._clock = clock or _now_ms
        self._buckets: Dict[str, RateLimitBucket] = {}
        self._lock = Lock()

    def check(self, identity: str, limit: int, window_ms: int) -> RateLimitResult:
        """
        Record a request for `identity` and report whether it is admitted.

        Rejected calls do not touch the bucket, so they keep reporting the
        same `reset_at`.

        Args:
            identity: Bucket key, e.g. "203.0.113.7:chat"
            limit: Maximum requests per window
            window_ms: Window length in milliseconds

        Returns:
            RateLimitResult: Admission flag, remaining quota and window reset time
        """
        with self._lock:
            now = self._clock()
            bucket = self._buckets.get(identity)

            if bucket is None or now >= bucket.reset_at:
                bucket = RateLimitBucket(count=1, reset_at=now + window_ms)
                self._buckets[identity] = bucket
                return RateLimitResult(allowed=True, remaining=max(0, limit - 1), reset_at=bucket.reset_at)

            if bucket.count >= limit:
                return RateLimitResult(allowed=False, remaining=0, reset_at=bucket.reset_at)

            bucket.count += 1
            return RateLimitResult(
                allowed=True,
                remaining=max(0, limit - bucket.count),
                reset_at=bucket.reset_at,
            )

    def reset(self) -> None:
        """Drop all buckets."""
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)
