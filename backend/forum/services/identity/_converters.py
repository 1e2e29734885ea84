from __future__ import annotations

from forum.models.user import User

from .dto import UserPrivateOut, UserPublicOut


def user_to_public(row: User) -> UserPublicOut:
    return UserPublicOut(
        id=row.id,
        username=row.username,
        display_name=row.display_name,
        created_at=row.created_at,
    )


def user_to_private(row: User) -> UserPrivateOut:
    return UserPrivateOut(
        id=row.id,
        email=row.email,
        username=row.username,
        display_name=row.display_name,
        role=row.role.value,
        last_login_at=row.last_login_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
