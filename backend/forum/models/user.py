"""Registered accounts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import check_password_hash, generate_password_hash

from forum.core.extensions import db

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin, enum_values


class UserRole(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


class User(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    A member (or admin) who can join communities, post, comment and vote.

    ``email`` is stored lowercased. ``username`` keeps the casing it was
    typed with; ``username_key`` holds its lowercase form and carries the
    uniqueness constraint. Deactivation sets ``deleted_at``: the account can
    no longer log in but its email and username stay taken.

    Passwords are write-only: assign ``user.password = "..."`` to store a
    werkzeug hash and check candidates with :meth:`verify_password`.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    username: Mapped[str] = mapped_column(String(30), nullable=False)
    username_key: Mapped[str] = mapped_column(String(30), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(
            UserRole,
            name="enum_user_role",
            native_enum=False,
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
        default=UserRole.MEMBER,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username_key", name="uq_users_username_key"),
        Index("ix_users_username", "username"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    @property
    def password(self) -> str:  # pragma: no cover - write-only
        raise AttributeError("User.password is write-only; use verify_password().")

    @password.setter
    def password(self, raw: str) -> None:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        # Shape only; the API schema does the full address validation.
        email = (value or "").strip().lower() if isinstance(value, str) else ""
        local, _, domain = email.partition("@")
        if not local or "." not in domain:
            raise ValueError("Email format looks invalid.")
        return email

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        username = value.strip() if isinstance(value, str) else ""
        if not username:
            raise ValueError("Username is required.")
        self.username_key = username.lower()
        return username
