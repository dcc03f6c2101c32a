"""In-process token-bucket rate limiting.

Each key (client address, optionally prefixed by a policy scope) owns one
bucket. Buckets refill continuously at ``capacity / window`` tokens per
second and never hold more than ``capacity`` tokens.

The limiter is per process. Under gunicorn every worker process keeps its
own buckets, so the effective budget scales with the number of workers.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from flask import Request

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RateLimitPolicy:
    """
    Bucket shape.

    :param name: Label used in logs (``"standard"``, ``"auth"``).
    :param capacity: Maximum tokens (burst size).
    :param window_seconds: Time to refill an empty bucket completely.
    """

    name: str
    capacity: int
    window_seconds: float

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

    @property
    def retry_after(self) -> int:
        """Whole seconds until one token is available in an empty bucket."""
        return max(1, -(-int(self.window_seconds) // self.capacity))


@dataclass(slots=True)
class _Bucket:
    tokens: float
    updated_at: float
    window_seconds: float


class TokenBucketRateLimiter:
    """
    Thread-safe map of key to token bucket.

    A single lock guards the map, so bucket creation happens exactly once
    per key and refill-check-decrement is one atomic step.

    :param clock: Monotonic time source in seconds (tests inject a fake).
    :param sweep_interval: Seconds between idle-bucket sweeps; ``0`` disables.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 300.0,
    ) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._lock = threading.Lock()
        self._buckets: dict[str, _Bucket] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def try_consume(self, key: str, policy: RateLimitPolicy) -> bool:
        """Take one token from ``key``'s bucket; ``False`` when it is empty."""
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)

            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = _Bucket(float(policy.capacity), now, policy.window_seconds)
                self._buckets[key] = bucket
            else:
                elapsed = max(0.0, now - bucket.updated_at)
                refill = elapsed * policy.capacity / policy.window_seconds
                bucket.tokens = min(float(policy.capacity), bucket.tokens + refill)
                bucket.updated_at = now

            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                return True
            return False

    def available(self, key: str, policy: RateLimitPolicy) -> float:
        """Tokens ``key`` could spend right now (full capacity if unseen)."""
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                return float(policy.capacity)
            elapsed = max(0.0, self._clock() - bucket.updated_at)
            refill = elapsed * policy.capacity / policy.window_seconds
            return min(float(policy.capacity), bucket.tokens + refill)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def _maybe_sweep(self, now: float) -> None:
        # Caller holds the lock. A bucket idle for a whole window is full again,
        # so dropping it is indistinguishable from keeping it.
        if self._sweep_interval <= 0 or now - self._last_sweep < self._sweep_interval:
            return
        idle = [k for k, b in self._buckets.items() if now - b.updated_at >= b.window_seconds]
        for k in idle:
            del self._buckets[k]
        self._last_sweep = now
        if idle:
            log.debug("Evicted %d idle rate-limit buckets", len(idle))


def client_key(request: Request) -> str:
    """
    Client identity used as bucket key.

    First non-empty ``X-Forwarded-For`` entry, else the socket address. The
    header is taken at face value, so clients not behind a trusted proxy can
    pick their own key.
    """
    forwarded = request.headers.get("X-Forwarded-For", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    return request.remote_addr or "unknown"
