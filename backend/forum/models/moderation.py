"""Site-level moderation: restrictions placed on user accounts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from forum.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, as_utc, enum_values


class RestrictionType(str, Enum):
    """``read_only`` blocks writes; ``suspended`` also blocks login."""

    READ_ONLY = "read_only"
    SUSPENDED = "suspended"


class UserRestriction(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Restriction issued by a site admin against a user.

    A restriction is active while it is not revoked and ``restricted_until``
    is either unset (indefinite) or still in the future.
    """

    __tablename__ = "user_restrictions"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    issued_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    restriction_type: Mapped[RestrictionType] = mapped_column(
        SAEnum(
            RestrictionType,
            name="enum_restriction_type",
            native_enum=False,
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    restricted_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_user_restrictions_user_id", "user_id"),)

    def is_active(self, now: datetime) -> bool:
        """Return ``True`` when the restriction currently applies."""
        if self.revoked_at is not None:
            return False
        until = as_utc(self.restricted_until)
        return until is None or until > now
