"""Repositories for communities, memberships, rules, recents and reserved terms."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, cast

from sqlalchemy import func, or_, select
from sqlalchemy.orm import InstrumentedAttribute

from forum.models.community import (
    Community,
    CommunityCategory,
    CommunityMembership,
    CommunityRule,
    RecentCommunity,
    ReservedTerm,
    name_key_for,
)
from forum.repositories.base import BaseRepository, KeysetPage, Page, Pagination


class CommunityRepository(BaseRepository[Community]):
    """
    Persistence-only repository for :class:`Community`.

    Every public lookup is by name and goes through ``name_key`` so
    ``/communities/Python`` and ``/communities/python`` resolve to the same row.
    """

    model = Community

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "name": Community.name_key,
            "created_at": Community.created_at,
            "member_count": Community.member_count,
            "last_active_at": Community.last_active_at,
        }

    def _updatable_fields(self) -> set[str]:
        return {"description", "category", "logo_uri", "banner_uri"}

    def get_by_name(self, name: str) -> Community | None:
        """Return the live community named ``name`` (any casing)."""
        stmt = self._live(select(Community).where(Community.name_key == name_key_for(name)))
        return cast(Community | None, self.session.execute(stmt).scalars().first())

    def name_taken(self, name: str) -> bool:
        """Return ``True`` when any community, even a deleted one, holds ``name``."""
        stmt = select(Community.id).where(Community.name_key == name_key_for(name))
        return self.session.execute(stmt).first() is not None

    def search(
        self,
        pagination: Pagination,
        *,
        q: str | None = None,
        category: CommunityCategory | None = None,
    ) -> Page[Community]:
        """Offset-page live communities filtered by text and category.

        :param q: Case-insensitive "contains" match on name or description.
        :param category: Exact category filter.
        """
        stmt = self._live(select(Community))
        if q:
            stmt = stmt.where(
                or_(
                    Community.name_key.icontains(q, autoescape=True),
                    Community.description.icontains(q, autoescape=True),
                )
            )
        if category is not None:
            stmt = stmt.where(Community.category == category)
        return self.paginate_stmt(stmt, pagination)

    def joined_by_user(self, user_id: int, pagination: Pagination) -> Page[Community]:
        """Offset-page the live communities ``user_id`` is an active member of."""
        stmt = (
            self._live(select(Community))
            .join(CommunityMembership, CommunityMembership.community_id == Community.id)
            .where(
                CommunityMembership.user_id == user_id,
                CommunityMembership.deleted_at.is_(None),
            )
        )
        return self.paginate_stmt(stmt, pagination)


class CommunityMembershipRepository(BaseRepository[CommunityMembership]):
    """Persistence for memberships; at most one row per (community, user)."""

    model = CommunityMembership

    def _sortable_fields(self):
        return {"joined_at": CommunityMembership.joined_at}

    def get_row(self, community_id: int, user_id: int) -> CommunityMembership | None:
        """Return the membership row whether active or soft-deleted."""
        stmt = select(CommunityMembership).where(
            CommunityMembership.community_id == community_id,
            CommunityMembership.user_id == user_id,
        )
        return cast(CommunityMembership | None, self.session.execute(stmt).scalars().first())

    def count_active(self, community_id: int) -> int:
        stmt = select(func.count(CommunityMembership.id)).where(
            CommunityMembership.community_id == community_id,
            CommunityMembership.deleted_at.is_(None),
        )
        return int(self.session.execute(stmt).scalar_one())

    def list_members(self, community_id: int, pagination: Pagination) -> Page[CommunityMembership]:
        stmt = self._live(select(CommunityMembership)).where(
            CommunityMembership.community_id == community_id
        )
        return self.paginate_stmt(stmt, pagination)


class RecentCommunityRepository(BaseRepository[RecentCommunity]):
    """Per-user recent activity markers."""

    model = RecentCommunity

    def touch(self, user_id: int, community_id: int, when: datetime) -> RecentCommunity:
        """Create or refresh the (user, community) marker."""
        stmt = select(RecentCommunity).where(
            RecentCommunity.user_id == user_id,
            RecentCommunity.community_id == community_id,
        )
        row = self.session.execute(stmt).scalars().first()
        if row is None:
            return self.add(
                RecentCommunity(user_id=user_id, community_id=community_id, last_activity_at=when)
            )
        row.last_activity_at = when
        self.flush()
        return cast(RecentCommunity, row)

    def latest_for_user(self, user_id: int, *, limit: int = 5) -> list[RecentCommunity]:
        """Return the ``limit`` most recent markers whose community is still live."""
        stmt = (
            select(RecentCommunity)
            .join(Community, Community.id == RecentCommunity.community_id)
            .where(RecentCommunity.user_id == user_id, Community.deleted_at.is_(None))
            .order_by(RecentCommunity.last_activity_at.desc(), RecentCommunity.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())


class CommunityRuleRepository(BaseRepository[CommunityRule]):
    """Persistence for community rules."""

    model = CommunityRule

    def _updatable_fields(self):
        return {"order_index", "text"}

    def get_in_community(self, rule_id: int, community_id: int) -> CommunityRule | None:
        """Return the live rule ``rule_id`` only if it belongs to ``community_id``."""
        stmt = self._live(select(CommunityRule)).where(
            CommunityRule.id == rule_id, CommunityRule.community_id == community_id
        )
        return cast(CommunityRule | None, self.session.execute(stmt).scalars().first())

    def order_index_taken(
        self, community_id: int, order_index: int, *, exclude_id: int | None = None
    ) -> bool:
        """Return ``True`` when an active rule of the community uses ``order_index``."""
        stmt = self._live(select(CommunityRule.id)).where(
            CommunityRule.community_id == community_id,
            CommunityRule.order_index == order_index,
        )
        if exclude_id is not None:
            stmt = stmt.where(CommunityRule.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    def page_for_community(
        self,
        community_id: int,
        *,
        sort: str,
        descending: bool,
        q: str | None,
        cursor: str | None,
        limit: int,
    ) -> KeysetPage[CommunityRule]:
        """Keyset-page the live rules of a community.

        :param sort: ``"order"`` (by ``order_index``) or ``"created_at"``.
        :param descending: Direction of the sort key and of the id tiebreaker.
        :param q: Case-insensitive "contains" filter on the rule text.
        """
        stmt = self._live(select(CommunityRule)).where(CommunityRule.community_id == community_id)
        if q:
            stmt = stmt.where(CommunityRule.text.icontains(q, autoescape=True))
        column = CommunityRule.created_at if sort == "created_at" else CommunityRule.order_index
        return self.keyset(stmt, [(column, descending)], cursor=cursor, limit=limit)


class ReservedTermRepository(BaseRepository[ReservedTerm]):
    """Terms that cannot be used as community names."""

    model = ReservedTerm

    def _sortable_fields(self):
        return {"term": ReservedTerm.term_key, "created_at": ReservedTerm.created_at}

    def is_reserved(self, name: str) -> bool:
        stmt = select(ReservedTerm.id).where(ReservedTerm.term_key == name_key_for(name))
        return self.session.execute(stmt).first() is not None
