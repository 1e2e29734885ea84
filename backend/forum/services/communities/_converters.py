from __future__ import annotations

from operator import attrgetter

from forum.models.community import Community, CommunityMembership, CommunityRule, RecentCommunity
from forum.services.identity._converters import user_to_public

from .dto import CommunityOut, MemberOut, RecentCommunityOut, RuleOut


def rule_to_out(row: CommunityRule) -> RuleOut:
    return RuleOut(
        id=row.id,
        community_id=row.community_id,
        order_index=row.order_index,
        text=row.text,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def community_to_out(
    row: Community, *, with_rules: bool = False, joined: bool | None = None
) -> CommunityOut:
    rules: list[RuleOut] = []
    if with_rules:
        live = [r for r in row.rules if r.deleted_at is None]
        rules = [rule_to_out(r) for r in sorted(live, key=attrgetter("order_index", "id"))]
    return CommunityOut(
        id=row.id,
        name=row.name,
        category=row.category.value,
        description=row.description,
        logo_uri=row.logo_uri,
        banner_uri=row.banner_uri,
        owner_id=row.owner_id,
        member_count=row.member_count,
        last_active_at=row.last_active_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        rules=rules,
        joined=joined,
    )


def member_to_out(row: CommunityMembership) -> MemberOut:
    return MemberOut(user=user_to_public(row.user), joined_at=row.joined_at)


def recent_to_out(row: RecentCommunity) -> RecentCommunityOut:
    return RecentCommunityOut(
        community=community_to_out(row.community),
        last_activity_at=row.last_activity_at,
    )
