"""
Token bucket rate limiter.

Shared by every caller in the process; refills continuously at a fixed
rate and blocks callers until a token is available.
"""

import threading
import time
from typing import Callable


class TokenBucket:
    """
    Thread-safe token bucket.

    Usage:
        limiter = TokenBucket(tokens_per_interval=60, interval_seconds=60)
        limiter.acquire()   # waits if the bucket is empty
    """

    def __init__(
        self,
        tokens_per_interval: int,
        interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if tokens_per_interval <= 0:
            raise ValueError("tokens_per_interval must be positive")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.capacity = float(tokens_per_interval)
        self.refill_rate = tokens_per_interval / interval_seconds  # tokens per second
        self._clock = clock
        self._sleep = sleep
        self._tokens = self.capacity
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_rate)
        self._last_refill = now

    @property
    def available(self) -> float:
        """Tokens currently in the bucket."""
        with self._lock:
            self._refill()
            return self._tokens

    def try_acquire(self, tokens: float = 1) -> bool:
        """Take tokens without waiting. Returns False if not enough are left."""
        if tokens > self.capacity:
            raise ValueError(f"Cannot take {tokens} tokens from a bucket of {self.capacity}")
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    def acquire(self, tokens: float = 1) -> float:
        """
        Take tokens, sleeping until enough have been refilled.

        Returns:
            Total seconds spent waiting
        """
        if tokens > self.capacity:
            raise ValueError(f"Cannot take {tokens} tokens from a bucket of {self.capacity}")

        waited = 0.0
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= tokens:
                    self._tokens -= tokens
                    return waited
                wait_time = (tokens - self._tokens) / self.refill_rate

            # Sleep outside the lock so other threads can refill/check
            self._sleep(wait_time)
            waited += wait_time
