from __future__ import annotations

from datetime import datetime

from forum.models.community import ReservedTerm
from forum.models.moderation import UserRestriction
from forum.models.user import User

from .dto import AdminUserOut, ReservedTermOut, RestrictionOut


def admin_user_to_out(row: User) -> AdminUserOut:
    return AdminUserOut(
        id=row.id,
        email=row.email,
        username=row.username,
        display_name=row.display_name,
        role=row.role.value,
        last_login_at=row.last_login_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )


def restriction_to_out(row: UserRestriction, *, now: datetime) -> RestrictionOut:
    return RestrictionOut(
        id=row.id,
        user_id=row.user_id,
        issued_by_id=row.issued_by_id,
        restriction_type=row.restriction_type.value,
        reason=row.reason,
        restricted_until=row.restricted_until,
        revoked_at=row.revoked_at,
        is_active=row.is_active(now),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def reserved_term_to_out(row: ReservedTerm) -> ReservedTermOut:
    return ReservedTermOut(id=row.id, term=row.term, created_at=row.created_at)
