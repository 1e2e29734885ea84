"""User profile endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from forum.api.deps import (
    json_response,
    no_content,
    optional_auth,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from forum.schemas import (
    CommunitySchema,
    UserPrivateSchema,
    UserPublicSchema,
    UserUpdateSchema,
    build_meta,
)
from forum.services.communities import CommunityQueryService
from forum.services.identity import IdentityService, UserUpdateIn

bp = Blueprint("users", __name__, url_prefix="/users")

user_public_schema = UserPublicSchema()
user_private_schema = UserPrivateSchema()
user_update_schema = UserUpdateSchema()
community_list_schema = CommunitySchema(many=True, exclude=("rules",))


@bp.get("/<int:user_id>")
@optional_auth
@timing
def get_user(user_id: int):
    """Return a public profile."""

    service = IdentityService(ctx=service_context())
    out = service.get_public(user_id)
    return json_response({"data": user_public_schema.dump(out)})


@bp.put("/<int:user_id>")
@require_auth
@timing
def update_user(user_id: int):
    """Update the caller's own username or display name."""

    data = user_update_schema.load(request.get_json(silent=True) or {})
    service = IdentityService(ctx=service_context())
    out = service.update_profile(
        UserUpdateIn(
            user_id=user_id,
            username=data.get("username"),
            display_name=data.get("display_name"),
            clear_display_name="display_name" in data and data["display_name"] is None,
        )
    )
    return json_response({"data": user_private_schema.dump(out)})


@bp.delete("/<int:user_id>")
@require_auth
@timing
def deactivate_user(user_id: int):
    """Deactivate the caller's account and sign out every session."""

    service = IdentityService(ctx=service_context())
    service.deactivate(user_id)
    return no_content()


@bp.get("/<int:user_id>/memberships")
@require_auth
@timing
def list_memberships(user_id: int):
    """Return the communities the caller has joined."""

    pagination = parse_pagination()
    service = CommunityQueryService(ctx=service_context())
    out = service.joined_by(user_id, page=pagination.page, limit=pagination.limit)
    return json_response({"data": community_list_schema.dump(out.items), "meta": build_meta(out.meta)})
