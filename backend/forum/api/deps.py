"""View helpers: auth guards, query parsing, the service context and responses."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from forum.core.errors import Forbidden
from forum.core.logger import ensure_request_id
from forum.repositories.base import Pagination
from forum.schemas.common import CursorQuerySchema, PaginationQuerySchema
from forum.services._shared.base import ServiceContext
from forum.services._shared.dto import CursorIn
from forum.services.auth.dto import ClientInfo

F = TypeVar("F", bound=Callable[..., Any])

GUEST_ROLE = "guest"


def _jwt_guard(*, optional: bool, scope: str | None = None) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            verify_jwt_in_request(optional=optional)
            if scope is not None and scope not in (get_jwt() or {}).get("scopes", ()):
                raise Forbidden(f"Token lacks the '{scope}' scope", code="insufficient_scope")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


#: Any valid access token, member or guest.
require_auth = _jwt_guard(optional=False)
#: Anonymous callers allowed; a sent token must still be valid.
optional_auth = _jwt_guard(optional=True)


def require_scope(scope: str) -> Callable[[F], F]:
    """Valid token whose ``scopes`` claim contains ``scope`` (``admin`` for /admin)."""
    return _jwt_guard(optional=False, scope=scope)


def limit_bounds() -> dict[str, int]:
    return {
        "default_limit": int(current_app.config.get("PAGINATION_DEFAULT_LIMIT", 20)),
        "max_limit": int(current_app.config.get("PAGINATION_MAX_LIMIT", 100)),
    }


def parse_pagination() -> Pagination:
    """``page``, ``limit`` and comma-separated ``sort`` from the query string."""
    data = PaginationQuerySchema(**limit_bounds()).load(request.args)
    return Pagination(page=data["page"], limit=data["limit"], sort=data["sort"])


def parse_cursor() -> CursorIn:
    """``cursor`` and ``limit`` for keyset listings."""
    data = CursorQuerySchema(**limit_bounds()).load(request.args)
    return CursorIn(cursor=data["cursor"], limit=data["limit"])


def service_context() -> ServiceContext:
    """
    Caller identity for services, read from the JWT verified by a guard.

    Member tokens yield ``actor_id``/``session_id``; guest tokens yield
    ``guest_id`` only; no token yields an anonymous context.
    """
    claims = get_jwt() or {}
    request_id = ensure_request_id()
    scopes = tuple(claims.get("scopes", ()))
    if not claims:
        return ServiceContext(request_id=request_id)
    if claims.get("role") == GUEST_ROLE:
        return ServiceContext(request_id=request_id, scopes=scopes, guest_id=claims.get("gid"))

    sid = claims.get("sid")
    return ServiceContext(
        actor_id=int(claims["sub"]),
        session_id=int(sid) if sid is not None else None,
        request_id=request_id,
        scopes=scopes,
    )


def client_info(client_platform: str | None = None) -> ClientInfo:
    """User agent, IP and platform stored on the session row at login."""
    user_agent = request.user_agent.string if request.user_agent else ""
    return ClientInfo(
        user_agent=user_agent or None,
        ip=request.remote_addr,
        client_platform=client_platform,
    )


def json_response(payload: Any, *, status: int = 200) -> Response:
    response = jsonify(payload)
    response.status_code = status
    return response


def no_content() -> Response:
    return current_app.response_class(status=204)


def timing(func: F) -> F:
    """Debug-log how long the view body took, excluding serialization by Flask."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            current_app.logger.debug(
                "view.elapsed",
                extra={
                    "view": func.__name__,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

    return wrapper  # type: ignore[return-value]
