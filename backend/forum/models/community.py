"""Community aggregate: community, rules, memberships and recent visits."""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from forum.core.extensions import db

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin, enum_values, utcnow

if TYPE_CHECKING:
    from .user import User

COMMUNITY_NAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9_-]{1,28}[A-Za-z0-9])?$")


class CommunityCategory(str, Enum):
    """Fixed catalogue of community categories."""

    TECH_PROGRAMMING = "Tech & Programming"
    SCIENCE = "Science"
    MOVIES_TV = "Movies & TV"
    GAMES = "Games"
    SPORTS = "Sports"
    LIFESTYLE_WELLNESS = "Lifestyle & Wellness"
    STUDY_EDUCATION = "Study & Education"
    ART_DESIGN = "Art & Design"
    BUSINESS_FINANCE = "Business & Finance"
    NEWS_CURRENT_AFFAIRS = "News & Current Affairs"


def name_key_for(name: str) -> str:
    """Return the case-insensitive lookup key of a community name."""
    return name.strip().lower()


class Community(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Named forum grouping that owns posts, rules and memberships.

    ``name`` keeps the creator's casing while ``name_key`` enforces
    case-insensitive uniqueness and drives every lookup by name.
    ``member_count`` is maintained by the membership service.
    """

    __tablename__ = "communities"

    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    name_key: Mapped[str] = mapped_column(String(30), nullable=False)
    category: Mapped[CommunityCategory] = mapped_column(
        SAEnum(
            CommunityCategory,
            name="enum_community_category",
            native_enum=False,
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    logo_uri: Mapped[str | None] = mapped_column(String(500), nullable=True)
    banner_uri: Mapped[str | None] = mapped_column(String(500), nullable=True)
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_active_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    owner: Mapped[User] = relationship("User", lazy="joined")
    rules: Mapped[list[CommunityRule]] = relationship(
        back_populates="community",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CommunityRule.order_index",
    )

    __table_args__ = (
        UniqueConstraint("name_key", name="uq_communities_name_key"),
        CheckConstraint("member_count >= 0", name="member_count_non_negative"),
        Index("ix_communities_category", "category"),
    )

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        """Validate the public name and keep ``name_key`` in sync."""
        if not isinstance(value, str) or not COMMUNITY_NAME_PATTERN.match(value.strip()):
            raise ValueError("Community name format is invalid.")
        v = value.strip()
        self.name_key = name_key_for(v)
        return v


class CommunityRule(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """Ordered, short rule text displayed on a community."""

    __tablename__ = "community_rules"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id", ondelete="CASCADE"), nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(String(100), nullable=False)

    community: Mapped[Community] = relationship(back_populates="rules")

    __table_args__ = (
        CheckConstraint("order_index >= 1", name="order_index_positive"),
        Index("ix_community_rules_community_id_order_index", "community_id", "order_index"),
    )


class CommunityMembership(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Membership of a user in a community.

    Leaving soft-deletes the row; joining again reactivates it, so there is
    at most one row per (community, user).
    """

    __tablename__ = "community_memberships"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    community: Mapped[Community] = relationship(lazy="joined")
    user: Mapped[User] = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("community_id", "user_id", name="uq_community_memberships_community_user"),
        Index("ix_community_memberships_user_id", "user_id"),
    )


class RecentCommunity(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Per-user "recently active in" marker, one row per (user, community)."""

    __tablename__ = "recent_communities"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id", ondelete="CASCADE"), nullable=False
    )
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    community: Mapped[Community] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "community_id", name="uq_recent_communities_user_community"),
    )


class ReservedTerm(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Term that may not be used as a community name (matched on ``name_key``)."""

    __tablename__ = "reserved_terms"

    term: Mapped[str] = mapped_column(String(30), nullable=False)
    term_key: Mapped[str] = mapped_column(String(30), nullable=False)

    __table_args__ = (UniqueConstraint("term_key", name="uq_reserved_terms_term_key"),)

    @validates("term")
    def _normalize_term(self, key: str, value: str) -> str:
        v = (value or "").strip()
        if not v:
            raise ValueError("Term is required.")
        self.term_key = v.lower()
        return v

