"""DTOs for site administration: accounts, restrictions and reserved terms."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from forum.services._shared.dto import PageMeta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserSearchIn:
    q: str | None = None
    page: int = 1
    limit: int = 20
    sort: list[str] | None = None


@dataclass(frozen=True, slots=True)
class RestrictionCreateIn:
    """
    Restriction to issue against a user.

    :param restriction_type: ``"read_only"`` or ``"suspended"``.
    :param restricted_until: End of the restriction; ``None`` is indefinite.
    """

    user_id: int
    restriction_type: str
    reason: str | None = None
    restricted_until: datetime | None = None


@dataclass(frozen=True, slots=True)
class RestrictionSearchIn:
    user_id: int | None = None
    active: bool | None = None
    page: int = 1
    limit: int = 20


@dataclass(frozen=True, slots=True)
class ReservedTermCreateIn:
    term: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AdminUserOut:
    """Full account view for administrators, deactivated accounts included."""

    id: int
    email: str
    username: str
    display_name: str | None
    role: str
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None


@dataclass(frozen=True, slots=True)
class AdminUserListOut:
    items: list[AdminUserOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class RestrictionOut:
    id: int
    user_id: int
    issued_by_id: int | None
    restriction_type: str
    reason: str | None
    restricted_until: datetime | None
    revoked_at: datetime | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class RestrictionListOut:
    items: list[RestrictionOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class ReservedTermOut:
    id: int
    term: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class ReservedTermListOut:
    items: list[ReservedTermOut]
    meta: PageMeta
