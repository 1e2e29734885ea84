"""Server-side login sessions and guest visitor records."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forum.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, as_utc

if TYPE_CHECKING:
    from .user import User


class UserSession(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Refresh-token backed login session.

    Only ``sha256(refresh_token)`` is stored; the raw token never touches the
    database. Rotation replaces ``hashed_token`` and pushes ``expires_at``.

    Fields
    ------
    user_id : int
        Owning account.
    hashed_token : str
        Hex SHA-256 digest of the current refresh token.
    user_agent, ip, client_platform : str | None
        Client hints captured at login/refresh.
    expires_at : datetime
        Absolute expiry; refresh is refused afterwards.
    last_seen_at : datetime | None
        Last successful refresh.
    revoked_at : datetime | None
        Set by logout, logout-all, password change or reuse detection.
    """

    __tablename__ = "user_sessions"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    hashed_token: Mapped[str] = mapped_column(String(64), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    client_platform: Mapped[str | None] = mapped_column(String(64), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship("User", lazy="joined")

    __table_args__ = (
        Index("ix_user_sessions_user_id", "user_id"),
        Index("ix_user_sessions_hashed_token", "hashed_token"),
    )

    def is_active(self, now: datetime) -> bool:
        """Return ``True`` when the session is neither revoked nor expired."""
        if self.revoked_at is not None:
            return False
        expires_at = as_utc(self.expires_at)
        return expires_at is not None and expires_at > now


class GuestVisitor(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Anonymous device correlated by a client-provided fingerprint."""

    __tablename__ = "guest_visitors"

    device_fingerprint: Mapped[str] = mapped_column(String(128), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("device_fingerprint", name="uq_guest_visitors_device_fingerprint"),
    )
