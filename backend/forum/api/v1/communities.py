"""Community endpoints: lifecycle, membership, members, rules and feed."""

from __future__ import annotations

from flask import Blueprint, request

from forum.api.deps import (
    json_response,
    limit_bounds,
    no_content,
    optional_auth,
    parse_cursor,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from forum.schemas import (
    CommunityCreateSchema,
    CommunitySchema,
    CommunitySearchSchema,
    CommunityUpdateSchema,
    MemberSchema,
    MembershipInputSchema,
    MembershipSchema,
    PostFeedQuerySchema,
    PostSchema,
    RuleCreateSchema,
    RuleListQuerySchema,
    RuleSchema,
    RuleUpdateSchema,
    build_cursor_meta,
    build_meta,
)
from forum.services.communities import (
    CommunityCommandService,
    CommunityCreateIn,
    CommunityQueryService,
    CommunityRuleService,
    CommunitySearchIn,
    CommunityUpdateIn,
    MembershipService,
    RuleCreateIn,
    RuleIn,
    RuleListIn,
    RuleUpdateIn,
)
from forum.services.posts import PostFeedIn, PostQueryService

bp = Blueprint("communities", __name__, url_prefix="/communities")

community_schema = CommunitySchema()
community_list_schema = CommunitySchema(many=True, exclude=("rules",))
community_create_schema = CommunityCreateSchema()
community_update_schema = CommunityUpdateSchema()
membership_input_schema = MembershipInputSchema()
membership_schema = MembershipSchema()
member_list_schema = MemberSchema(many=True)
rule_schema = RuleSchema()
rule_list_schema = RuleSchema(many=True)
rule_create_schema = RuleCreateSchema()
rule_update_schema = RuleUpdateSchema()
rule_query_schema = RuleListQuerySchema()
feed_query_schema = PostFeedQuerySchema()
post_list_schema = PostSchema(many=True)


def _search_schema() -> CommunitySearchSchema:
    return CommunitySearchSchema(**limit_bounds())


# --------------------------------------------------------------------------- #
# Communities
# --------------------------------------------------------------------------- #


@bp.get("")
@optional_auth
@timing
def search_communities():
    """Return communities filtered by text and category."""

    args = _search_schema().load(request.args)
    service = CommunityQueryService(ctx=service_context())
    out = service.search(
        CommunitySearchIn(
            q=args["q"],
            category=args["category"],
            page=args["page"],
            limit=args["limit"],
            sort=args["sort"],
        )
    )
    return json_response({"data": community_list_schema.dump(out.items), "meta": build_meta(out.meta)})


@bp.post("")
@require_auth
@timing
def create_community():
    """Create a community owned by the caller."""

    data = community_create_schema.load(request.get_json(silent=True) or {})
    service = CommunityCommandService(ctx=service_context())
    out = service.create(
        CommunityCreateIn(
            name=data["name"],
            category=data["category"],
            description=data["description"],
            logo_uri=data["logo_uri"],
            banner_uri=data["banner_uri"],
            rules=[RuleIn(order_index=r["order_index"], text=r["text"]) for r in data["rules"]],
        )
    )
    return json_response({"data": community_schema.dump(out)}, status=201)


@bp.get("/<string:name>")
@optional_auth
@timing
def get_community(name: str):
    service = CommunityQueryService(ctx=service_context())
    out = service.get(name)
    return json_response({"data": community_schema.dump(out)})


@bp.put("/<string:name>")
@require_auth
@timing
def update_community(name: str):
    """Update description, category or imagery (owner only)."""

    data = community_update_schema.load(request.get_json(silent=True) or {})
    service = CommunityCommandService(ctx=service_context())
    out = service.update(CommunityUpdateIn(name=name, **data))
    return json_response({"data": community_schema.dump(out)})


@bp.delete("/<string:name>")
@require_auth
@timing
def delete_community(name: str):
    service = CommunityCommandService(ctx=service_context())
    service.delete(name)
    return no_content()


# --------------------------------------------------------------------------- #
# Membership
# --------------------------------------------------------------------------- #


@bp.put("/<string:name>/membership")
@require_auth
@timing
def set_membership(name: str):
    """Join or leave a community; repeating the same state is a no-op."""

    data = membership_input_schema.load(request.get_json(silent=True) or {})
    service = MembershipService(ctx=service_context())
    out = service.set_membership(name, join=data["join"])
    return json_response({"data": membership_schema.dump(out)})


@bp.delete("/<string:name>/membership")
@require_auth
@timing
def leave_community(name: str):
    service = MembershipService(ctx=service_context())
    service.leave(name)
    return no_content()


@bp.get("/<string:name>/members")
@optional_auth
@timing
def list_members(name: str):
    pagination = parse_pagination()
    service = CommunityQueryService(ctx=service_context())
    out = service.members(name, page=pagination.page, limit=pagination.limit)
    return json_response({"data": member_list_schema.dump(out.items), "meta": build_meta(out.meta)})


# --------------------------------------------------------------------------- #
# Rules
# --------------------------------------------------------------------------- #


@bp.get("/<string:name>/rules")
@optional_auth
@timing
def list_rules(name: str):
    """Return a keyset page of rules ordered by position or creation time."""

    args = rule_query_schema.load(request.args)
    cursor = parse_cursor()
    service = CommunityRuleService(ctx=service_context())
    out = service.list(
        RuleListIn(
            name=name,
            sort=args["sort"],
            order=args["order"],
            q=args["q"],
            cursor=cursor.cursor,
            limit=cursor.limit,
        )
    )
    return json_response({"data": rule_list_schema.dump(out.items), "meta": build_cursor_meta(out.meta)})


@bp.post("/<string:name>/rules")
@require_auth
@timing
def create_rule(name: str):
    data = rule_create_schema.load(request.get_json(silent=True) or {})
    service = CommunityRuleService(ctx=service_context())
    out = service.create(RuleCreateIn(name=name, order_index=data["order_index"], text=data["text"]))
    return json_response({"data": rule_schema.dump(out)}, status=201)


@bp.get("/<string:name>/rules/<int:rule_id>")
@optional_auth
@timing
def get_rule(name: str, rule_id: int):
    service = CommunityRuleService(ctx=service_context())
    out = service.get(name, rule_id)
    return json_response({"data": rule_schema.dump(out)})


@bp.put("/<string:name>/rules/<int:rule_id>")
@require_auth
@timing
def update_rule(name: str, rule_id: int):
    data = rule_update_schema.load(request.get_json(silent=True) or {})
    service = CommunityRuleService(ctx=service_context())
    out = service.update(RuleUpdateIn(name=name, rule_id=rule_id, **data))
    return json_response({"data": rule_schema.dump(out)})


@bp.delete("/<string:name>/rules/<int:rule_id>")
@require_auth
@timing
def delete_rule(name: str, rule_id: int):
    service = CommunityRuleService(ctx=service_context())
    service.delete(name, rule_id)
    return no_content()


# --------------------------------------------------------------------------- #
# Feed
# --------------------------------------------------------------------------- #


@bp.get("/<string:name>/posts")
@optional_auth
@timing
def community_feed(name: str):
    """Return a keyset page of the community's posts."""

    args = feed_query_schema.load(request.args)
    cursor = parse_cursor()
    service = PostQueryService(ctx=service_context())
    out = service.feed(
        PostFeedIn(
            sort=args["sort"],
            community_name=name,
            q=args["q"],
            cursor=cursor.cursor,
            limit=cursor.limit,
        )
    )
    return json_response({"data": post_list_schema.dump(out.items), "meta": build_cursor_meta(out.meta)})
