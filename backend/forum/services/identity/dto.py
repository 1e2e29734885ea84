"""DTOs for the identity (user account) service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe user projection shown next to content and on profiles.

    :param id: User id.
    :param username: Public handle.
    :param display_name: Optional display name.
    :param created_at: Account creation time.
    """

    id: int
    username: str
    display_name: str | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class UserPrivateOut:
    """Projection of the caller's own account (adds email and role)."""

    id: int
    email: str
    username: str
    display_name: str | None
    role: str
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Partial profile update.

    ``None`` leaves a field unchanged; ``clear_display_name`` removes it.

    :param user_id: Target user (must be the caller).
    :param username: New handle.
    :param display_name: New display name.
    :param clear_display_name: Set ``display_name`` to null.
    """

    user_id: int
    username: str | None = None
    display_name: str | None = None
    clear_display_name: bool = False
