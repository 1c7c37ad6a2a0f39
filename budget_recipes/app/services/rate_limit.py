"""Coarse per-identity request counter (fixed window, in memory)."""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Allows ``max_requests`` per identity in each ``window_seconds`` window.

    Expired windows are swept on access once per window, or explicitly with
    ``evict_expired`` from a scheduler.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._last_sweep = clock()

    def hit(self, identity: str) -> bool:
        """Count one request; False when the identity is over its limit."""
        now = self.clock()
        if now - self._last_sweep >= self.window_seconds:
            self.evict_expired(now)
        start, count = self._windows.get(identity, (now, 0))
        if now - start >= self.window_seconds:
            start, count = now, 0
        if count >= self.max_requests:
            logger.warning("Rate limit exceeded for %s", identity)
            return False
        self._windows[identity] = (start, count + 1)
        return True

    def remaining(self, identity: str) -> int:
        start, count = self._windows.get(identity, (self.clock(), 0))
        if self.clock() - start >= self.window_seconds:
            return self.max_requests
        return max(0, self.max_requests - count)

    def evict_expired(self, now: Optional[float] = None) -> int:
        now = self.clock() if now is None else now
        stale = [key for key, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in stale:
            del self._windows[key]
        self._last_sweep = now
        return len(stale)

    def __len__(self) -> int:
        return len(self._windows)
