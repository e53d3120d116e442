"""Gateway and principal authentication.

Tokens and passwords are handled by the upstream auth layer. What reaches
this service is:

- an ``X-API-Key`` proving the request comes through that gateway, and
- the id of the user it authenticated, in the ``X-User-ID`` header.

The admin check is done here against the ``users`` table, so revoking the
admin flag takes effect on the next request.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated

from fastapi import Depends, Header, Request

from truthmeter.api.deps import get_secret_service
from truthmeter.core.config import settings
from truthmeter.core.errors import AuthenticationAppError
from truthmeter.services.secret_service import SecretService

logger = logging.getLogger(__name__)


def _hash_for_log(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()[:16]


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Examples:
        >>> parse_api_keys("key1, key2 , key3 ")
        {'key1', 'key2', 'key3'}
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()

    return {key.strip() for key in keys_string.split(",") if key.strip()}


def validate_api_key(provided_key: str | None) -> None:
    """Validate the gateway key against the configured keys.

    Raises:
        AuthenticationAppError: If the key is missing or unknown, or if
            authentication is required but no keys are configured.
    """
    if not settings.app.api_key_required:
        return

    valid_keys = parse_api_keys(settings.app.api_keys)

    if not valid_keys:
        logger.error(
            "auth.api_keys_not_configured",
            extra={"auth_required": settings.app.api_key_required},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="API key authentication is enabled but no valid keys are configured",
            details={"hint": "Set APP_API_KEYS or disable auth with APP_API_KEY_REQUIRED=false"},
        )

    if not provided_key or provided_key not in valid_keys:
        logger.warning(
            "auth.invalid_api_key",
            extra={
                "api_key_present": bool(provided_key),
                "api_key_hash": _hash_for_log(provided_key) if provided_key else None,
            },
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid or missing API key",
        )


async def verify_api_key(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency enforcing the gateway API key.

    Usage:
        @router.get("/v1/secrets", dependencies=[Depends(verify_api_key)])
    """
    validate_api_key(x_api_key)


def get_current_user_id(request: Request) -> str:
    """FastAPI dependency returning the user id forwarded by the auth layer.

    Raises:
        AuthenticationAppError: If the header is missing or blank.
    """
    user_id = (request.headers.get(settings.app.user_id_header) or "").strip()
    if not user_id:
        raise AuthenticationAppError(
            code="missing_principal",
            message="Authorization required.",
            details={"hint": f"Provide the {settings.app.user_id_header} header"},
        )
    return user_id


def require_admin(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[SecretService, Depends(get_secret_service)],
) -> str:
    """FastAPI dependency allowing only users whose ``is_admin`` flag is set.

    Returns:
        The admin's user id.
    """
    user = service.get_user(user_id)
    if user is None or not user.is_admin:
        logger.warning("auth.admin_required", extra={"user_known": user is not None})
        raise AuthenticationAppError(code="admin_required", message="Admin privileges required.")
    return user_id
