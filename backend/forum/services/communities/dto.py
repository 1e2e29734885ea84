"""DTOs for communities, memberships and community rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from forum.services._shared.dto import CursorMeta, PageMeta
from forum.services.identity.dto import UserPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RuleIn:
    order_index: int
    text: str


@dataclass(frozen=True, slots=True)
class CommunityCreateIn:
    """
    Input DTO to create a community.

    :param name: Public name (3-30 chars, letters, digits, ``_`` and ``-``).
    :param category: One of :class:`forum.models.community.CommunityCategory` values.
    :param description: Optional description (<= 500 chars).
    :param logo_uri: Optional logo image URI.
    :param banner_uri: Optional banner image URI.
    :param rules: Initial rules (at most 20).
    """

    name: str
    category: str
    description: str | None = None
    logo_uri: str | None = None
    banner_uri: str | None = None
    rules: list[RuleIn] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CommunityUpdateIn:
    """Partial update; ``None`` leaves a field untouched. The name is immutable."""

    name: str
    description: str | None = None
    category: str | None = None
    logo_uri: str | None = None
    banner_uri: str | None = None


@dataclass(frozen=True, slots=True)
class CommunitySearchIn:
    q: str | None = None
    category: str | None = None
    page: int = 1
    limit: int = 20
    sort: list[str] | None = None


@dataclass(frozen=True, slots=True)
class RuleListIn:
    """
    Keyset listing of a community's rules.

    :param sort: ``"order"`` or ``"created_at"``.
    :param order: ``"asc"`` or ``"desc"``.
    :param q: Case-insensitive text filter.
    """

    name: str
    sort: str = "order"
    order: str = "asc"
    q: str | None = None
    cursor: str | None = None
    limit: int = 20


@dataclass(frozen=True, slots=True)
class RuleCreateIn:
    name: str
    order_index: int
    text: str


@dataclass(frozen=True, slots=True)
class RuleUpdateIn:
    name: str
    rule_id: int
    order_index: int | None = None
    text: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RuleOut:
    id: int
    community_id: int
    order_index: int
    text: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class RuleListOut:
    items: list[RuleOut]
    meta: CursorMeta


@dataclass(frozen=True, slots=True)
class CommunityOut:
    """
    Community projection.

    ``joined`` is ``None`` when the caller is anonymous or a guest.
    """

    id: int
    name: str
    category: str
    description: str | None
    logo_uri: str | None
    banner_uri: str | None
    owner_id: int
    member_count: int
    last_active_at: datetime
    created_at: datetime
    updated_at: datetime
    rules: list[RuleOut] = field(default_factory=list)
    joined: bool | None = None


@dataclass(frozen=True, slots=True)
class CommunityListOut:
    items: list[CommunityOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class MembershipOut:
    """
    Result of a membership toggle.

    :param joined: Whether the caller is now a member.
    :param member_count: Community member count after the change.
    :param joined_at: Join time when ``joined`` is true.
    """

    community_id: int
    joined: bool
    member_count: int
    joined_at: datetime | None


@dataclass(frozen=True, slots=True)
class MemberOut:
    user: UserPublicOut
    joined_at: datetime


@dataclass(frozen=True, slots=True)
class MemberListOut:
    items: list[MemberOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class RecentCommunityOut:
    community: CommunityOut
    last_activity_at: datetime
