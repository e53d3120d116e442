"""In-memory per-user post throttle.

Notes:
- Per-process only: running multiple workers multiplies the effective rate.
- State resets on restart; users regain posting rights immediately.
- Thread-safe: one lock guards the check-and-set of every key.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from truthmeter.adapters.rate_limit.base import AbstractPostThrottle, ThrottleResult

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000.0


class InMemoryPostThrottle(AbstractPostThrottle):
    """Allow one post per key every ``window_ms`` milliseconds.

    The map of last post timestamps is bounded: once it grows past
    ``max_entries``, entries whose window has already elapsed are dropped.
    Dropping them never changes a decision because an elapsed entry would
    allow the next post anyway.
    """

    def __init__(
        self,
        *,
        window_ms: int,
        max_entries: int = 10000,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        """Initialize the throttle.

        Args:
            window_ms: Minimum spacing between posts of the same key.
            max_entries: Map size that triggers eviction of stale entries.
            clock: Time source returning milliseconds.

        Raises:
            ValueError: If window_ms or max_entries are invalid.
        """
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self._window_ms = window_ms
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._last_post_by_key: dict[str, float] = {}

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_post_by_key)

    def check(self, key: str, *, now_ms: float | None = None) -> ThrottleResult:
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock() if now_ms is None else now_ms

        with self._lock:
            last = self._last_post_by_key.get(key)
            if last is not None and now - last < self._window_ms:
                remaining_ms = self._window_ms - (now - last)
                return ThrottleResult(
                    allowed=False,
                    window_ms=self._window_ms,
                    last_post_ms=last,
                    retry_after_seconds=max(1, math.ceil(remaining_ms / 1000.0)),
                )

            self._last_post_by_key[key] = now
            if len(self._last_post_by_key) > self._max_entries:
                self._evict_stale_locked(now)

            return ThrottleResult(
                allowed=True,
                window_ms=self._window_ms,
                last_post_ms=now,
                retry_after_seconds=None,
                previous_post_ms=last,
            )

    def release(self, key: str, claimed_ms: float, previous_ms: float | None = None) -> bool:
        with self._lock:
            if self._last_post_by_key.get(key) != claimed_ms:
                return False
            if previous_ms is None:
                del self._last_post_by_key[key]
            else:
                self._last_post_by_key[key] = previous_ms
        return True

    def evict_stale(self, now_ms: float | None = None) -> int:
        """Drop entries whose window has elapsed. Returns how many were dropped."""

        now = self._clock() if now_ms is None else now_ms
        with self._lock:
            return self._evict_stale_locked(now)

    def clear(self) -> None:
        with self._lock:
            self._last_post_by_key.clear()

    def _evict_stale_locked(self, now: float) -> int:
        stale = [
            k for k, last in self._last_post_by_key.items()
            if now - last >= self._window_ms
        ]
        for key in stale:
            del self._last_post_by_key[key]

        if stale:
            logger.debug(
                "post_throttle.evicted",
                extra={"evicted": len(stale), "size": len(self._last_post_by_key)},
            )
        return len(stale)
