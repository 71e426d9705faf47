from __future__ import annotations

import sys
import threading
import time
from typing import Callable, Optional

from ..config import ClientConfig


class RateLimiter:
    """
    Fixed-window request quota (GLEIF: 60 requests / 60 s per user).

    `acquire()` returns once one more request may be issued. The window
    check and the counter update happen under one lock, so concurrent
    callers (batch fan-out) can never overrun the quota. A caller that hits
    the quota sleeps out the rest of the window while holding the lock;
    everyone queued behind it then sees the fresh window.
    """

    def __init__(
        self,
        quota: int,
        window_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        debug: bool = False,
    ) -> None:
        if quota <= 0 or window_s <= 0:
            raise ValueError("quota and window_s must be > 0")
        self._quota = int(quota)
        self._window_s = float(window_s)
        self._clock = clock
        self._sleep = sleep
        self._debug = bool(debug)
        self._lock = threading.Lock()
        self._count = 0
        self._window_start = clock()

    @classmethod
    def from_config(
        cls, config: Optional[ClientConfig] = None, **kwargs
    ) -> "RateLimiter":
        config = config or ClientConfig()
        kwargs.setdefault("debug", config.debug)
        return cls(config.rate_limit, config.window_s, **kwargs)

    @property
    def quota(self) -> int:
        return self._quota

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def acquire(self) -> None:
        with self._lock:
            now = self._clock()
            elapsed = now - self._window_start
            if elapsed >= self._window_s:
                self._count = 0
                self._window_start = now
                elapsed = 0.0

            if self._count >= self._quota:
                wait = self._window_s - elapsed
                if self._debug:
                    print(
                        f"[ratelimit] quota of {self._quota} reached; waiting {wait:.2f}s",
                        file=sys.stderr,
                    )
                if wait > 0:
                    self._sleep(wait)
                self._count = 0
                self._window_start = self._clock()

            self._count += 1
