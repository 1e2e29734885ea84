"""Account lookups and the admin user listing."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select

from forum.models.user import User
from forum.repositories.base import BaseRepository, Page, Pagination


def _email_key(email: str) -> str:
    return email.lower().strip()


def _username_key(username: str) -> str:
    return username.strip().lower()


class UserRepository(BaseRepository[User]):
    """
    Accounts, matched on their normalized columns.

    Deactivated users are soft-deleted: ``get_live`` skips them, but their
    email and username stay reserved.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "username": User.username_key,
            "created_at": User.created_at,
            "last_login_at": User.last_login_at,
        }

    def _updatable_fields(self):
        # Owner-editable profile fields; email, password and role have their own flows.
        return {"username", "display_name"}

    def get_by_email(self, email: str) -> User | None:
        """Account holding ``email`` in any casing, deactivated ones included."""
        stmt = select(User).where(User.email == _email_key(email))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == _email_key(email))
        return self.session.execute(stmt).first() is not None

    def exists_by_username(self, username: str, *, exclude_id: int | None = None) -> bool:
        """
        :param username: Handle to check, compared case-insensitively.
        :param exclude_id: Account to ignore, so a user can keep their own name.
        """
        stmt = select(User.id).where(User.username_key == _username_key(username))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    def search(self, pagination: Pagination, *, q: str | None = None) -> Page[User]:
        """Admin listing over every account; ``q`` is a substring of email or username."""
        stmt = select(User)
        if q:
            stmt = stmt.where(
                or_(
                    User.email.icontains(q, autoescape=True),
                    User.username_key.icontains(q.lower(), autoescape=True),
                )
            )
        return self.paginate_stmt(stmt, pagination)
