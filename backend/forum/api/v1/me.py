"""Endpoints scoped to the authenticated caller."""

from __future__ import annotations

from flask import Blueprint

from forum.api.deps import (
    json_response,
    no_content,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from forum.core.security import build_auth_service
from forum.schemas import RecentCommunitySchema, SessionSchema, UserPrivateSchema, build_meta
from forum.services.communities import CommunityQueryService
from forum.services.identity import IdentityService

bp = Blueprint("me", __name__, url_prefix="/me")

user_schema = UserPrivateSchema()
session_schema = SessionSchema()
session_list_schema = SessionSchema(many=True)
recent_list_schema = RecentCommunitySchema(many=True)


@bp.get("")
@require_auth
@timing
def whoami():
    """Return the authenticated user's account."""

    service = IdentityService(ctx=service_context())
    out = service.get_me()
    return json_response({"data": user_schema.dump(out)})


@bp.get("/sessions")
@require_auth
@timing
def list_sessions():
    """Return the caller's login sessions, newest first."""

    pagination = parse_pagination()
    service = build_auth_service(service_context())
    out = service.list_sessions(page=pagination.page, limit=pagination.limit)
    return json_response({"data": session_list_schema.dump(out.items), "meta": build_meta(out.meta)})


@bp.get("/sessions/<int:session_id>")
@require_auth
@timing
def get_session(session_id: int):
    service = build_auth_service(service_context())
    out = service.get_session(session_id)
    return json_response({"data": session_schema.dump(out)})


@bp.delete("/sessions/<int:session_id>")
@require_auth
@timing
def revoke_session(session_id: int):
    """Sign out one of the caller's sessions."""

    service = build_auth_service(service_context())
    service.revoke_session(session_id)
    return no_content()


@bp.get("/recent-communities")
@require_auth
@timing
def recent_communities():
    """Return the communities the caller was most recently active in."""

    service = CommunityQueryService(ctx=service_context())
    items = service.recent()
    return json_response({"data": recent_list_schema.dump(items)})
