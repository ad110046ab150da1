"""
Sliding Window Rate Limiter
===========================

Per-client request counting over a trailing time window.

The in-memory limiter only guards a single process. Deployments running
several workers should use RedisRateLimiter so all workers share windows.

Version: 0.1.0
"""

import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict, deque
from collections.abc import Callable

from shared.logging import get_logger


logger = get_logger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RateLimiter(ABC):
    """Abstract sliding-window limiter."""

    @property
    @abstractmethod
    def backend(self) -> str:
        """Backend name for logs and health output."""
        ...

    @abstractmethod
    async def allow(self, client_key: str, limit: int, window_ms: int) -> bool:
        """
        Record an attempt for `client_key` if it fits in the window.

        Args:
            client_key: Caller identity (usually the client IP)
            limit: Attempts allowed per window
            window_ms: Window length in milliseconds

        Returns:
            True when the attempt is allowed; denied attempts are not recorded
        """
        ...


class InMemoryRateLimiter(RateLimiter):
    """
    Process-local limiter.

    Windows live in an LRU-ordered map capped at `max_keys`. Idle keys are
    swept every `sweep_interval` calls; beyond the cap the least recently
    seen keys are evicted.
    """

    def __init__(
        self,
        max_keys: int = 10_000,
        sweep_interval: int = 1_000,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            max_keys: Upper bound on tracked clients
            sweep_interval: Calls between idle-key sweeps
            clock: Millisecond clock (defaults to a monotonic clock)
        """
        self.max_keys = max_keys
        self.sweep_interval = sweep_interval
        self._clock = clock or _monotonic_ms
        self._windows: OrderedDict[str, deque[float]] = OrderedDict()
        self._lock = threading.Lock()
        self._calls = 0

    @property
    def backend(self) -> str:
        return "memory"

    async def allow(self, client_key: str, limit: int, window_ms: int) -> bool:
        return self.check(client_key, limit, window_ms)

    def check(self, client_key: str, limit: int, window_ms: int) -> bool:
        """Synchronous form of `allow`."""
        with self._lock:
            now = self._clock()
            window_start = now - window_ms

            timestamps = self._windows.get(client_key)
            if timestamps is None:
                timestamps = deque()
                self._windows[client_key] = timestamps
            else:
                self._windows.move_to_end(client_key)

            while timestamps and timestamps[0] <= window_start:
                timestamps.popleft()

            allowed = len(timestamps) < limit
            if allowed:
                timestamps.append(now)

            self._calls += 1
            if self._calls % self.sweep_interval == 0 or len(self._windows) > self.max_keys:
                self._sweep(window_start)

        if not allowed:
            logger.warning(
                "rate_limit_exceeded",
                client=client_key,
                limit=limit,
                window_ms=window_ms,
            )
        return allowed

    def _sweep(self, window_start: float) -> None:
        """Drop idle windows, then evict LRU keys over the cap. Caller holds the lock."""
        idle = [key for key, ts in self._windows.items() if not ts or ts[-1] <= window_start]
        for key in idle:
            del self._windows[key]

        evicted = 0
        while len(self._windows) > self.max_keys:
            self._windows.popitem(last=False)
            evicted += 1

        if idle or evicted:
            logger.debug("rate_limit_swept", idle=len(idle), evicted=evicted)

    def tracked_keys(self) -> int:
        """Number of clients currently holding a window."""
        return len(self._windows)

    def reset(self) -> None:
        """Forget all windows."""
        with self._lock:
            self._windows.clear()
            self._calls = 0
