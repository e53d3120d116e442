"""HTTP middleware for request ID propagation and correlation.

The middleware:
- Accepts an incoming request id header or generates a UUID
- Stores request_id in contextvars so every log line of the request carries it
- Echoes the request_id and the request duration in the response headers
- Clears the context after the request so ids never leak between requests

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from truthmeter.core.config import settings
from truthmeter.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Tag the request with a correlation id and time it.

    The header name comes from ``LOG_REQUEST_ID_HEADER`` (default
    ``X-Request-ID``). The response gets the same id back plus an
    ``X-Request-Duration-ms`` header.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
