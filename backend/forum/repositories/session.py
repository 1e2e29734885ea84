"""Repositories for login sessions and guest visitors."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from forum.models.session import GuestVisitor, UserSession
from forum.repositories.base import BaseRepository, Page, Pagination


class UserSessionRepository(BaseRepository[UserSession]):
    """Persistence for :class:`UserSession` rows."""

    model = UserSession

    def _sortable_fields(self):
        return {
            "created_at": UserSession.created_at,
            "expires_at": UserSession.expires_at,
            "last_seen_at": UserSession.last_seen_at,
        }

    def get_for_user(self, session_id: int, user_id: int) -> UserSession | None:
        """Return the session only when it belongs to ``user_id``."""
        stmt = select(UserSession).where(
            UserSession.id == session_id, UserSession.user_id == user_id
        )
        return cast(UserSession | None, self.session.execute(stmt).scalars().first())

    def list_for_user(self, user_id: int, pagination: Pagination) -> Page[UserSession]:
        """Offset-page a user's sessions (revoked ones included)."""
        stmt = select(UserSession).where(UserSession.user_id == user_id)
        return self.paginate_stmt(stmt, pagination)

    def revoke_all_for_user(
        self,
        user_id: int,
        *,
        when: datetime,
        except_session_id: int | None = None,
    ) -> int:
        """Stamp ``revoked_at`` on every still-open session of a user.

        :param user_id: Owner of the sessions.
        :param when: Revocation timestamp.
        :param except_session_id: Session to leave untouched.
        :returns: Number of sessions revoked.
        """
        self.flush()
        stmt = (
            update(UserSession)
            .where(UserSession.user_id == user_id, UserSession.revoked_at.is_(None))
            .values(revoked_at=when)
            .execution_options(synchronize_session="fetch")
        )
        if except_session_id is not None:
            stmt = stmt.where(UserSession.id != except_session_id)
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)


class GuestVisitorRepository(BaseRepository[GuestVisitor]):
    """Persistence for :class:`GuestVisitor` rows keyed by device fingerprint."""

    model = GuestVisitor

    def get_by_fingerprint(self, fingerprint: str) -> GuestVisitor | None:
        stmt = select(GuestVisitor).where(GuestVisitor.device_fingerprint == fingerprint)
        return cast(GuestVisitor | None, self.session.execute(stmt).scalars().first())
