import threading
import time
from collections import defaultdict, deque
from typing import Callable, Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

settings = get_settings()

# Per client IP; applied to the auth endpoints.
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


class SlidingWindowRateLimiter:
    """Per-key request counter over a sliding window (one minute by default).

    One instance is created at startup and stored on ``app.state``; it is
    safe to share across the threadpool workers serving sync endpoints.
    """

    def __init__(self, window_seconds: float = 60.0, clock: Optional[Callable[[], float]] = None):
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._hits: dict[str, deque] = defaultdict(deque)

    def _prune(self, hits: deque, now: float) -> None:
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

    def allow(self, key: str, limit: int) -> bool:
        now = self._clock()
        with self._lock:
            hits = self._hits[key]
            self._prune(hits, now)
            if len(hits) >= limit:
                return False
            hits.append(now)
            return True

    def remaining(self, key: str, limit: int) -> int:
        now = self._clock()
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return limit
            self._prune(hits, now)
            return max(0, limit - len(hits))

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
