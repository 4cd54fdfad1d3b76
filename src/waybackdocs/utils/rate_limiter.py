"""
Request pacing for download workers.

Pacer is the per-worker fixed delay taken before every task. Each worker
owns its own Pacer, so five workers may still start requests together.
TokenBucket is an optional pool-wide limiter layered on top of that.
"""

from __future__ import annotations

import threading
import time
import random
from typing import Callable, Optional


DEFAULT_TASK_DELAY = 10.0


class Pacer:
    def __init__(self, delay_secs: float = DEFAULT_TASK_DELAY,
                 sleep: Callable[[float], None] = time.sleep,
                 shared: Optional["TokenBucket"] = None):
        """
        Args:
            delay_secs: unconditional wait before each task
            sleep: sleep function (injectable for tests)
            shared: optional pool-wide bucket consulted after the local delay
        """
        self.delay_secs = delay_secs
        self.shared = shared
        self._sleep = sleep

    def wait(self):
        if self.delay_secs > 0:
            self._sleep(self.delay_secs)
        if self.shared is not None:
            self.shared.acquire()


class TokenBucket:
    def __init__(self, rate_per_sec: float = 0.1, burst: int = 1, jitter_ms: int = 300,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            rate_per_sec: average tokens per second (e.g., 0.1 = 1 token/10s)
            burst: bucket capacity
            jitter_ms: random jitter added after acquire to avoid lockstep
        """
        self.rate = rate_per_sec
        self.capacity = burst
        self.tokens = burst
        self._sleep = sleep
        self._clock = clock
        self.last = clock()
        self.lock = threading.Lock()
        self.jitter_ms = jitter_ms

    def acquire(self):
        while True:
            with self.lock:
                now = self._clock()
                elapsed = now - self.last
                # Refill
                self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
                self.last = now
                if self.tokens >= 1:
                    self.tokens -= 1
                    break
                # Compute wait for next token
                needed = 1 - self.tokens
                wait = max(needed / self.rate, 0.01)
            self._sleep(wait)

        # Apply small jitter outside lock
        if self.jitter_ms > 0:
            self._sleep(random.uniform(0, self.jitter_ms) / 1000.0)
