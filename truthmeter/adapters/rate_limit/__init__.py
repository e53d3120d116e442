"""Post throttling adapters.

This package provides a small abstraction layer so the service can start with
an in-memory throttle and later migrate to Redis or another shared store
without changing the service layer.
"""

from truthmeter.adapters.rate_limit.base import AbstractPostThrottle, ThrottleResult
from truthmeter.adapters.rate_limit.in_memory import InMemoryPostThrottle

__all__ = ["AbstractPostThrottle", "InMemoryPostThrottle", "ThrottleResult"]
