"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- The gateway API key (``X-API-Key``) and forwarded principal (``X-User-ID``)
  security schemes, with health endpoints exempted
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from truthmeter.core.config import settings

_TAGS = [
    {
        "name": "Secrets",
        "description": "Post, browse and vote on anonymous secrets.",
    },
    {
        "name": "Admin",
        "description": "Moderation of users and secrets. Requires an admin user.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and security schemes."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "ApiKeyAuth",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "Gateway key shared with the upstream auth layer.",
            },
        )
        security_schemes.setdefault(
            "UserId",
            {
                "type": "apiKey",
                "in": "header",
                "name": settings.app.user_id_header,
                "description": "Id of the user authenticated by the upstream auth layer.",
            },
        )

        schema.setdefault("security", [{"ApiKeyAuth": [], "UserId": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in _TAGS:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith("/health"):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
