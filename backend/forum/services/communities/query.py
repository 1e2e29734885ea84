from __future__ import annotations

import logging

from forum.repositories.community import CommunityRepository
from forum.services._shared.base import BaseService
from forum.services._shared.dto import PageMeta
from forum.services._shared.errors import NotFoundError

from ._converters import community_to_out, member_to_out, recent_to_out
from .command import resolve_category
from .dto import CommunityListOut, CommunityOut, CommunitySearchIn, MemberListOut, RecentCommunityOut

logger = logging.getLogger(__name__)

RECENT_COMMUNITIES_LIMIT = 5


class CommunityQueryService(BaseService):
    """Read-only community projections."""

    def search(self, dto: CommunitySearchIn) -> CommunityListOut:
        """Offset-page live communities by text, category and sort tokens."""
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort or ["name"])
        category = resolve_category(dto.category) if dto.category else None
        with self.ro_uow() as uow:
            repo: CommunityRepository = uow.communities
            result = repo.search(pagination, q=dto.q, category=category)
            return CommunityListOut(
                items=[community_to_out(row) for row in result.items],
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    def get(self, name: str) -> CommunityOut:
        """Return a community with its rules; ``joined`` is set for members."""
        with self.ro_uow() as uow:
            community = uow.communities.get_by_name(name)
            if community is None:
                raise NotFoundError("Community", name)
            joined: bool | None = None
            if self.ctx.is_member:
                row = uow.memberships.get_row(community.id, self.ctx.actor_id)
                joined = row is not None and not row.is_deleted
            return community_to_out(community, with_rules=True, joined=joined)

    def members(self, name: str, *, page: int = 1, limit: int = 20) -> MemberListOut:
        pagination = self.ensure_pagination(page=page, limit=limit, sort=["joined_at"])
        with self.ro_uow() as uow:
            community = uow.communities.get_by_name(name)
            if community is None:
                raise NotFoundError("Community", name)
            result = uow.memberships.list_members(community.id, pagination)
            return MemberListOut(
                items=[member_to_out(row) for row in result.items],
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    def joined_by(self, user_id: int, *, page: int = 1, limit: int = 20) -> CommunityListOut:
        """List the communities a user belongs to (self only)."""
        actor_id = self.require_actor()
        self.ensure_owner(actor_id, user_id, msg="You can only list your own memberships.")
        pagination = self.ensure_pagination(page=page, limit=limit, sort=["name"])
        with self.ro_uow() as uow:
            result = uow.communities.joined_by_user(user_id, pagination)
            return CommunityListOut(
                items=[community_to_out(row, joined=True) for row in result.items],
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    def recent(self) -> list[RecentCommunityOut]:
        """The caller's most recently active communities."""
        actor_id = self.require_actor()
        with self.ro_uow() as uow:
            rows = uow.recent_communities.latest_for_user(actor_id, limit=RECENT_COMMUNITIES_LIMIT)
            return [recent_to_out(row) for row in rows]
