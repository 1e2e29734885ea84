"""Account-level write policy backed by site restrictions."""

from __future__ import annotations

from datetime import datetime

from forum.models.moderation import RestrictionType
from forum.repositories.moderation import UserRestrictionRepository
from forum.services._shared.errors import AuthorizationError


def ensure_can_write(repo: UserRestrictionRepository, user_id: int, now: datetime) -> None:
    """Refuse writes for users under any active restriction.

    :raises AuthorizationError: ``account_restricted`` when a ``read_only``
        or ``suspended`` restriction currently applies.
    """
    if repo.has_active(user_id, now):
        raise AuthorizationError("Your account is restricted.", code="account_restricted")


def ensure_can_login(repo: UserRestrictionRepository, user_id: int, now: datetime) -> None:
    """:raises AuthorizationError: ``account_suspended`` for active suspensions."""
    if repo.has_active(user_id, now, restriction_type=RestrictionType.SUSPENDED):
        raise AuthorizationError("Your account is suspended.", code="account_suspended")
