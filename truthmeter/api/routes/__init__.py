from __future__ import annotations

from truthmeter.api.routes.admin import router as admin_router
from truthmeter.api.routes.health import router as health_router
from truthmeter.api.routes.secrets import router as secrets_router

__all__ = ["admin_router", "health_router", "secrets_router"]
