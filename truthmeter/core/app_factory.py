"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build a fresh app per case.
"""

from __future__ import annotations

from fastapi import FastAPI

from truthmeter.api.routes import admin_router, health_router, secrets_router
from truthmeter.core.config import settings
from truthmeter.core.exception_handlers import setup_exception_handlers
from truthmeter.core.logging import configure_logging
from truthmeter.core.middleware import request_id_middleware
from truthmeter.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Truth Meter API",
        description=(
            "Anonymous secrets with a one-vote-per-user truth meter. Users post "
            "short categorized secrets, browse the newest ones or a random one, "
            "and vote whether each is a truth or a lie. Requires X-API-Key and "
            "the X-User-ID forwarded by the authentication layer."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(secrets_router, prefix="/v1")
    app.include_router(admin_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
