"""
In-memory sliding window rate limiting for lead form submissions.

State is per process. Behind several instances each one enforces its own
limit, so the effective cap is per-instance per-IP rather than global.
"""

import time
import logging
from collections import OrderedDict, deque
from threading import Lock
from typing import Callable, Deque, Optional

from fastapi import Request

from src.shared.leads.config import (
    get_rate_limit_max_identifiers,
    get_rate_limit_max_requests,
    get_rate_limit_window_seconds,
)

UNKNOWN_CLIENT = "unknown"

# Checked in order; the first non-empty header wins
CLIENT_IP_HEADERS = ("X-Forwarded-For", "X-Real-IP", "CF-Connecting-IP")


def get_client_ip(request: Request) -> str:
    """
    Best-effort client identifier from proxy headers.
    Not authenticated and trivially spoofable.
    """
    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            # X-Forwarded-For is a chain; the first hop is the client
            first = value.split(",")[0].strip()
            if first:
                return first
    return UNKNOWN_CLIENT


def _now_ms() -> int:
    return int(time.time() * 1000)


class SlidingWindowRateLimiter:
    """
    Allows at most `max_requests` accepted attempts per identifier within a
    trailing window. Rejected attempts are not recorded.

    The identifier map is bounded: an identifier whose log empties is dropped,
    and at capacity expired identifiers are swept before the least recently
    seen one is evicted.
    """

    def __init__(
        self,
        max_requests: int,
        window_ms: int,
        max_identifiers: int = 10_000,
        clock: Optional[Callable[[], int]] = None,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_ms < 1:
            raise ValueError("window_ms must be positive")
        if max_identifiers < 1:
            raise ValueError("max_identifiers must be at least 1")
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.max_identifiers = max_identifiers
        self._clock = clock or _now_ms
        self._store: "OrderedDict[str, Deque[int]]" = OrderedDict()
        self._lock = Lock()

    def allow(self, identifier: str) -> bool:
        now = self._clock()
        window_start = now - self.window_ms
        with self._lock:
            request_times = self._store.get(identifier)
            if request_times is not None:
                while request_times and request_times[0] < window_start:
                    request_times.popleft()
                if not request_times:
                    del self._store[identifier]
                    request_times = None

            if request_times is not None and len(request_times) >= self.max_requests:
                return False

            if request_times is None:
                self._make_room(window_start)
                request_times = deque()
                self._store[identifier] = request_times
            else:
                self._store.move_to_end(identifier)
            request_times.append(now)
            return True

    def _make_room(self, window_start: int) -> None:
        """Caller holds the lock."""
        if len(self._store) < self.max_identifiers:
            return
        expired = [
            key for key, times in self._store.items()
            if not times or times[-1] < window_start
        ]
        for key in expired:
            del self._store[key]
        while len(self._store) >= self.max_identifiers:
            evicted, _ = self._store.popitem(last=False)
            logging.warning(f"Rate limiter at capacity ({self.max_identifiers}), evicted {evicted}")

    def tracked_identifiers(self) -> int:
        with self._lock:
            return len(self._store)

    def reset(self) -> None:
        with self._lock:
            self._store.clear()


_rate_limiter: Optional[SlidingWindowRateLimiter] = None
_rate_limiter_lock = Lock()


def get_rate_limiter() -> SlidingWindowRateLimiter:
    """Process-wide limiter shared by every lead endpoint."""
    global _rate_limiter
    with _rate_limiter_lock:
        if _rate_limiter is None:
            _rate_limiter = SlidingWindowRateLimiter(
                max_requests=get_rate_limit_max_requests(),
                window_ms=get_rate_limit_window_seconds() * 1000,
                max_identifiers=get_rate_limit_max_identifiers(),
            )
        return _rate_limiter
