"""Cross-origin policy for the ``/api`` routes."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

# ETag must be readable so browser clients can send it back in If-Match.
EXPOSED_HEADERS = ["ETag", "Location", "X-Request-ID"]
ALLOWED_HEADERS = ["Authorization", "Content-Type", "If-Match", "X-Request-ID"]


def parse_origins(raw: str | None) -> list[str] | str:
    """Split ``CORS_ORIGINS``; blank or ``*`` means any origin."""
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or "*" in origins:
        return "*"
    return origins


def init_app(app: Flask) -> None:
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    api_prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")
    CORS(
        app,
        resources={rf"{api_prefix}/*": {"origins": origins}},
        # Bearer tokens ride in Authorization, so credentials only matter for pinned origins.
        supports_credentials=origins != "*",
        expose_headers=EXPOSED_HEADERS,
        allow_headers=ALLOWED_HEADERS,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
