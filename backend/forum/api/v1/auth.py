"""Authentication endpoints using the service layer."""

from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt

from forum.api.deps import (
    client_info,
    json_response,
    no_content,
    require_auth,
    service_context,
    timing,
)
from forum.core.extensions import limiter
from forum.core.security import build_auth_service
from forum.schemas import (
    AuthorizedSchema,
    GuestJoinSchema,
    GuestTokenSchema,
    JoinSchema,
    LoginSchema,
    PasswordChangeSchema,
    RefreshSchema,
    TokenPairSchema,
)
from forum.services.auth import (
    GuestJoinIn,
    JoinIn,
    LoginIn,
    LogoutIn,
    PasswordChangeIn,
    RefreshIn,
)

bp = Blueprint("auth", __name__, url_prefix="/auth")

join_schema = JoinSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
password_schema = PasswordChangeSchema()
guest_schema = GuestJoinSchema()
authorized_schema = AuthorizedSchema()
token_schema = TokenPairSchema()
guest_token_schema = GuestTokenSchema()


def _join_rate_limit() -> str:
    return str(current_app.config.get("AUTH_JOIN_RATE_LIMIT", "10 per hour"))


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _current_logout() -> LogoutIn:
    claims = get_jwt()
    return LogoutIn(
        jti=claims["jti"],
        expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc),
    )


@bp.post("/join")
@limiter.limit(_join_rate_limit)
@timing
def join():
    """Register a new user, open their first session and return both tokens."""

    data = join_schema.load(request.get_json(silent=True) or {})
    service = build_auth_service()
    out = service.join(
        JoinIn(
            email=data["email"],
            username=data["username"],
            password=data["password"],
            display_name=data["display_name"],
            client=client_info(data["client_platform"]),
        )
    )
    return json_response({"data": authorized_schema.dump(out)}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    service = build_auth_service()
    out = service.login(
        LoginIn(
            email=data["email"],
            password=data["password"],
            client=client_info(data["client_platform"]),
        )
    )
    return json_response({"data": authorized_schema.dump(out)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh token of a session."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    service = build_auth_service()
    out = service.refresh(RefreshIn(refresh_token=data["refresh_token"], client=client_info()))
    return json_response({"data": token_schema.dump(out)})


@bp.post("/logout")
@require_auth
@timing
def logout():
    service = build_auth_service(service_context())
    service.logout(_current_logout())
    return no_content()


@bp.post("/logout-all")
@require_auth
@timing
def logout_all():
    service = build_auth_service(service_context())
    service.logout_all(_current_logout())
    return no_content()


@bp.put("/password")
@require_auth
@timing
def change_password():
    """Change the caller's password; other sessions are revoked."""

    data = password_schema.load(request.get_json(silent=True) or {})
    service = build_auth_service(service_context())
    service.change_password(
        PasswordChangeIn(current_password=data["current_password"], new_password=data["new_password"])
    )
    return no_content()


@bp.post("/guest")
@timing
def guest():
    """Issue a read-only guest token bound to a device fingerprint."""

    data = guest_schema.load(request.get_json(silent=True) or {})
    info = client_info()
    service = build_auth_service()
    out = service.guest_join(
        GuestJoinIn(
            device_fingerprint=data["device_fingerprint"],
            user_agent=data["user_agent"] or info.user_agent,
            ip=info.ip,
        )
    )
    return json_response({"data": guest_token_schema.dump(out)})
