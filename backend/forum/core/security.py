"""Flask-JWT-Extended callbacks: revocation checks and problem+json failures."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flask import Flask, current_app

from forum.core.errors import problem_response
from forum.core.extensions import jwt

if TYPE_CHECKING:
    from forum.services._shared.base import ServiceContext
    from forum.services.auth import AuthService

log = logging.getLogger(__name__)


def build_auth_service(ctx: ServiceContext | None = None) -> AuthService:
    """Wire :class:`AuthService` with the app's token provider, denylist and lifetimes."""
    from forum.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
    from forum.services.auth import AuthService
    from forum.services.auth.dto import AuthTokenConfig

    cfg = AuthTokenConfig(
        access_expires=current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        refresh_expires=current_app.config["JWT_REFRESH_TOKEN_EXPIRES"],
    )
    return AuthService(
        token_provider=JWTTokenProvider(),
        denylist_store=current_app.extensions["token_denylist"],
        token_cfg=cfg,
        ctx=ctx,
    )


def init_app(app: Flask) -> None:
    """
    Register JWT loader callbacks.

    Every protected request asks :meth:`AuthService.is_token_revoked`
    whether the token is denylisted, its session revoked or expired, or its
    account deactivated. Failures answer ``401`` as RFC 7807 problems.
    """

    @jwt.token_in_blocklist_loader
    def _is_revoked(_jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
        return build_auth_service().is_token_revoked(jwt_payload)

    @jwt.revoked_token_loader
    def _revoked(_jwt_header: dict[str, Any], _jwt_payload: dict[str, Any]):
        return problem_response(401, "Token has been revoked.", code="token_revoked")

    @jwt.expired_token_loader
    def _expired(_jwt_header: dict[str, Any], _jwt_payload: dict[str, Any]):
        return problem_response(401, "Token has expired.", code="token_expired")

    @jwt.invalid_token_loader
    def _invalid(reason: str):
        log.info("Invalid token: %s", reason)
        return problem_response(401, "Invalid token.", code="invalid_token")

    @jwt.unauthorized_loader
    def _missing(reason: str):
        return problem_response(401, "Authentication required.", code="unauthorized")

    @jwt.needs_fresh_token_loader
    def _needs_fresh(_jwt_header: dict[str, Any], _jwt_payload: dict[str, Any]):
        return problem_response(401, "Fresh token required.", code="fresh_token_required")
