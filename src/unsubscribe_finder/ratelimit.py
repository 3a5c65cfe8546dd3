"""Per-user request throttling."""

from __future__ import annotations

import threading
import time
from typing import Callable, Protocol

import structlog

from unsubscribe_finder.exceptions import RateLimitExceededError

logger = structlog.get_logger()


class RateLimiter(Protocol):
    """Admission check for one request by one user."""

    def hit(self, user_id: str) -> None: ...


class FixedWindowRateLimiter:
    """Allow at most ``max_requests`` per user in each fixed time window.

    Counters are keyed by ``(user_id, window_index)``; counters for past
    windows are discarded on every hit.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._counts: dict[tuple[str, int], int] = {}

    def hit(self, user_id: str) -> None:
        """Count a request, raising if the user is over the limit.

        Raises:
            RateLimitExceededError: If the user already used this window's quota.
        """
        window = int(self._clock() // self.window_seconds)
        key = (user_id, window)
        with self._lock:
            for stale in [k for k in self._counts if k[1] < window]:
                del self._counts[stale]

            count = self._counts.get(key, 0)
            if count >= self.max_requests:
                logger.warning("rate_limit_exceeded", user_id=user_id, limit=self.max_requests)
                raise RateLimitExceededError(
                    "Rate limit exceeded. Please wait before making more requests."
                )
            self._counts[key] = count + 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)
