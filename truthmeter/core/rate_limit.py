"""Process-wide post throttle.

This module wires the throttle adapter into the application: every
``SecretService`` built by the app shares one throttle so a user's posting
window holds across requests.

Throttling strategy:
- One post per user every ``APP_POST_WINDOW_MS`` milliseconds (default 15 s).
- Keyed by the user id forwarded by the upstream auth layer.
- In memory only: a restart clears all windows.
"""

from __future__ import annotations

import logging

from truthmeter.adapters.rate_limit.base import AbstractPostThrottle
from truthmeter.adapters.rate_limit.in_memory import InMemoryPostThrottle
from truthmeter.core.config import settings

logger = logging.getLogger(__name__)


_throttle: AbstractPostThrottle | None = None
_throttle_config: tuple[int, int] | None = None


def get_post_throttle() -> AbstractPostThrottle:
    """Return the process-wide post throttle.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the throttle is rebuilt.

    Returns:
        AbstractPostThrottle: Configured throttle instance.
    """

    global _throttle, _throttle_config

    config = (
        settings.app.post_window_ms,
        settings.app.throttle_max_entries,
    )

    if _throttle is None or _throttle_config != config:
        _throttle = InMemoryPostThrottle(
            window_ms=settings.app.post_window_ms,
            max_entries=settings.app.throttle_max_entries,
        )
        _throttle_config = config
        logger.info(
            "post_throttle.configured",
            extra={"window_ms": config[0], "max_entries": config[1]},
        )

    return _throttle
