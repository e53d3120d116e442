"""Post throttle interfaces.

Services depend on this abstraction (not the concrete implementation) so the
in-process map can be replaced by a shared store later without touching them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ThrottleResult:
    """Outcome of a throttle check.

    Attributes:
        allowed: Whether the post may proceed.
        window_ms: Minimum spacing between two posts of the same key.
        last_post_ms: Timestamp of the post currently holding the window.
        retry_after_seconds: Suggested wait in whole seconds when blocked.
        previous_post_ms: When allowed, the timestamp the claim replaced.
    """

    allowed: bool
    window_ms: int
    last_post_ms: float
    retry_after_seconds: int | None
    previous_post_ms: float | None = None


class AbstractPostThrottle(ABC):
    """Interface for per-user post throttles."""

    @abstractmethod
    def check(self, key: str, *, now_ms: float | None = None) -> ThrottleResult:
        """Check the window for ``key`` and claim it when the post is allowed.

        The check and the update form one atomic step per key.

        Args:
            key: User identifier.
            now_ms: Current time in milliseconds; the limiter clock when omitted.

        Returns:
            ThrottleResult describing whether the post was allowed.
        """
        raise NotImplementedError

    def post_allowed(self, key: str, now_ms: float | None = None) -> bool:
        return self.check(key, now_ms=now_ms).allowed

    @abstractmethod
    def release(self, key: str, claimed_ms: float, previous_ms: float | None = None) -> bool:
        """Give back a window claimed by ``check`` when the post did not happen.

        The entry is restored to ``previous_ms`` (or removed) only while it
        still holds ``claimed_ms``, so a newer claim is never undone.

        Returns:
            Whether the claim was released.
        """
        raise NotImplementedError
