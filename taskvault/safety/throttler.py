"""Sliding-window request throttling for unauthenticated endpoints"""

import math
import time
from collections import defaultdict, deque
from threading import Lock
from typing import Callable, Deque, Dict, Optional, Tuple

from ..utils.exceptions import RateLimitError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class Throttler:
    """
    Per-key request limiter.

    Features:
    - Time-window based limiting (max_requests per window_seconds)
    - Keys are arbitrary strings, typically the client address
    - Retry-After hint computed from the oldest request in the window
    """

    def __init__(
        self,
        max_requests: int = 20,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock

        self.requests: Dict[str, Deque[float]] = defaultdict(deque)
        self.lock = Lock()

    def can_execute(self, key: str) -> Tuple[bool, Optional[int]]:
        """
        Record a request for key if it is within limits.

        Returns:
            Tuple of (allowed, retry_after_seconds_if_not_allowed)
        """
        with self.lock:
            now = self.clock()
            self._clean_old_requests(now)

            hits = self.requests[key]
            if len(hits) >= self.max_requests:
                retry_after = math.ceil(hits[0] + self.window_seconds - now)
                return False, max(1, retry_after)

            hits.append(now)
            return True, None

    def check(self, key: str) -> None:
        """
        Raises:
            RateLimitError: when key has exhausted its window
        """
        allowed, retry_after = self.can_execute(key)
        if not allowed:
            logger.warning("Rate limit exceeded", key=key, retry_after=retry_after)
            raise RateLimitError(retry_after=retry_after)

    def _clean_old_requests(self, now: float) -> None:
        """Drop timestamps that fell out of the window"""
        cutoff = now - self.window_seconds
        for key in list(self.requests.keys()):
            hits = self.requests[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self.requests[key]
