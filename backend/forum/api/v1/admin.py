"""Site administration endpoints (``admin`` scope)."""

from __future__ import annotations

from flask import Blueprint, request

from forum.api.deps import (
    json_response,
    limit_bounds,
    no_content,
    parse_pagination,
    require_scope,
    service_context,
    timing,
)
from forum.schemas import (
    AdminUserSchema,
    ReservedTermCreateSchema,
    ReservedTermSchema,
    RestrictionCreateSchema,
    RestrictionQuerySchema,
    RestrictionSchema,
    UserFilterSchema,
    build_meta,
)
from forum.services.admin import (
    AdminService,
    ReservedTermCreateIn,
    RestrictionCreateIn,
    RestrictionSearchIn,
    UserSearchIn,
)

bp = Blueprint("admin", __name__, url_prefix="/admin")

user_schema = AdminUserSchema()
user_list_schema = AdminUserSchema(many=True)
user_filter_schema = UserFilterSchema()
restriction_schema = RestrictionSchema()
restriction_list_schema = RestrictionSchema(many=True)
restriction_create_schema = RestrictionCreateSchema()
term_schema = ReservedTermSchema()
term_list_schema = ReservedTermSchema(many=True)
term_create_schema = ReservedTermCreateSchema()


def _restriction_query_schema() -> RestrictionQuerySchema:
    return RestrictionQuerySchema(**limit_bounds())


# --------------------------------------------------------------------------- #
# Users
# --------------------------------------------------------------------------- #


@bp.get("/users")
@require_scope("admin")
@timing
def list_users():
    """Return accounts matching ``q`` on email or username."""

    filters = user_filter_schema.load(request.args)
    pagination = parse_pagination()
    service = AdminService(ctx=service_context())
    out = service.list_users(
        UserSearchIn(q=filters["q"], page=pagination.page, limit=pagination.limit, sort=pagination.sort)
    )
    return json_response({"data": user_list_schema.dump(out.items), "meta": build_meta(out.meta)})


@bp.get("/users/<int:user_id>")
@require_scope("admin")
@timing
def get_user(user_id: int):
    service = AdminService(ctx=service_context())
    out = service.get_user(user_id)
    return json_response({"data": user_schema.dump(out)})


# --------------------------------------------------------------------------- #
# Restrictions
# --------------------------------------------------------------------------- #


@bp.post("/restrictions")
@require_scope("admin")
@timing
def create_restriction():
    """Place a read-only or suspended restriction on a user."""

    data = restriction_create_schema.load(request.get_json(silent=True) or {})
    service = AdminService(ctx=service_context())
    out = service.create_restriction(RestrictionCreateIn(**data))
    return json_response({"data": restriction_schema.dump(out)}, status=201)


@bp.get("/restrictions")
@require_scope("admin")
@timing
def list_restrictions():
    args = _restriction_query_schema().load(request.args)
    service = AdminService(ctx=service_context())
    out = service.list_restrictions(
        RestrictionSearchIn(
            user_id=args["user_id"],
            active=args["active"],
            page=args["page"],
            limit=args["limit"],
        )
    )
    return json_response({"data": restriction_list_schema.dump(out.items), "meta": build_meta(out.meta)})


@bp.get("/restrictions/<int:restriction_id>")
@require_scope("admin")
@timing
def get_restriction(restriction_id: int):
    service = AdminService(ctx=service_context())
    out = service.get_restriction(restriction_id)
    return json_response({"data": restriction_schema.dump(out)})


@bp.post("/restrictions/<int:restriction_id>/revoke")
@require_scope("admin")
@timing
def revoke_restriction(restriction_id: int):
    """Lift a restriction before it ends."""

    service = AdminService(ctx=service_context())
    out = service.revoke_restriction(restriction_id)
    return json_response({"data": restriction_schema.dump(out)})


# --------------------------------------------------------------------------- #
# Reserved terms
# --------------------------------------------------------------------------- #


@bp.get("/reserved-terms")
@require_scope("admin")
@timing
def list_reserved_terms():
    pagination = parse_pagination()
    service = AdminService(ctx=service_context())
    out = service.list_reserved_terms(page=pagination.page, limit=pagination.limit)
    return json_response({"data": term_list_schema.dump(out.items), "meta": build_meta(out.meta)})


@bp.post("/reserved-terms")
@require_scope("admin")
@timing
def create_reserved_term():
    """Reserve a community name."""

    data = term_create_schema.load(request.get_json(silent=True) or {})
    service = AdminService(ctx=service_context())
    out = service.create_reserved_term(ReservedTermCreateIn(term=data["term"]))
    return json_response({"data": term_schema.dump(out)}, status=201)


@bp.delete("/reserved-terms/<int:term_id>")
@require_scope("admin")
@timing
def delete_reserved_term(term_id: int):
    service = AdminService(ctx=service_context())
    service.delete_reserved_term(term_id)
    return no_content()
