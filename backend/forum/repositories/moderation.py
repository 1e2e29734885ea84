"""Repository for site-level user restrictions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Select, or_, select

from forum.models.moderation import RestrictionType, UserRestriction
from forum.repositories.base import BaseRepository, Page, Pagination


def _active_clause(stmt: Select, now: datetime) -> Select:
    return stmt.where(
        UserRestriction.revoked_at.is_(None),
        or_(UserRestriction.restricted_until.is_(None), UserRestriction.restricted_until > now),
    )


class UserRestrictionRepository(BaseRepository[UserRestriction]):
    """Persistence-only repository for :class:`UserRestriction`."""

    model = UserRestriction

    def _sortable_fields(self):
        return {
            "created_at": UserRestriction.created_at,
            "restricted_until": UserRestriction.restricted_until,
        }

    def active_for_user(self, user_id: int, now: datetime) -> list[UserRestriction]:
        """Return the restrictions currently applying to ``user_id``."""
        stmt = _active_clause(select(UserRestriction).where(UserRestriction.user_id == user_id), now)
        return list(self.session.execute(stmt).scalars().all())

    def has_active(
        self, user_id: int, now: datetime, *, restriction_type: RestrictionType | None = None
    ) -> bool:
        """Return ``True`` if an active restriction (of ``restriction_type``) exists."""
        stmt = _active_clause(select(UserRestriction.id).where(UserRestriction.user_id == user_id), now)
        if restriction_type is not None:
            stmt = stmt.where(UserRestriction.restriction_type == restriction_type)
        return self.session.execute(stmt.limit(1)).first() is not None

    def search(
        self,
        pagination: Pagination,
        *,
        now: datetime,
        user_id: int | None = None,
        active: bool | None = None,
    ) -> Page[UserRestriction]:
        """Offset-page restrictions filtered by user and/or activity."""
        stmt = select(UserRestriction)
        if user_id is not None:
            stmt = stmt.where(UserRestriction.user_id == user_id)
        if active is True:
            stmt = _active_clause(stmt, now)
        elif active is False:
            stmt = stmt.where(
                or_(
                    UserRestriction.revoked_at.is_not(None),
                    UserRestriction.restricted_until <= now,
                )
            )
        return self.paginate_stmt(stmt, pagination)
