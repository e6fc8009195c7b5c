"""
Login attempt limiting.

The limiter is a fixed window counter keyed by client identifier. State sits
behind RateLimitStore so the in-process dict can be replaced by a shared
store when more than one worker serves the API.
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable


class RateLimitStore(ABC):
    """Storage for fixed windows, keyed by client identifier."""

    @abstractmethod
    def hit(self, key: str, window_seconds: float) -> tuple[int, float]:
        """
        Count one attempt for key and return (count, reset_at).

        Must be atomic: an expired or missing window starts over at 1,
        otherwise the count is incremented. A cache backend maps this to
        INCR plus EXPIRE on first hit.
        """

    @abstractmethod
    def clear(self) -> None:
        pass


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store. Expired windows are swept on every write."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def _sweep(self, now):
        expired = [k for k, (_, reset_at) in self._entries.items() if now > reset_at]
        for k in expired:
            del self._entries[k]

    def hit(self, key, window_seconds):
        with self._lock:
            now = self._clock()
            self._sweep(now)
            entry = self._entries.get(key)
            if entry is None:
                entry = (1, now + window_seconds)
            else:
                entry = (entry[0] + 1, entry[1])
            self._entries[key] = entry
            return entry

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


class RateLimiter:
    def __init__(self, store: RateLimitStore, max_attempts: int = 5, window_seconds: float = 60):
        self.store = store
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    def hit(self, key: str) -> bool:
        """Record an attempt. Returns False once the window's attempts are used up."""
        count, _ = self.store.hit(key, self.window_seconds)
        return count <= self.max_attempts
