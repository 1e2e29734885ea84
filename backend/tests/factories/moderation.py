"""Factory Boy definition for :class:`forum.models.moderation.UserRestriction`."""

from __future__ import annotations

import factory

from forum.models.moderation import RestrictionType, UserRestriction
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class UserRestrictionFactory(BaseFactory):
    """Indefinite read-only restriction issued by an admin."""

    class Meta:
        model = UserRestriction
        exclude = ("user", "issued_by")

    user = factory.SubFactory(UserFactory)
    issued_by = factory.SubFactory(UserFactory, admin=True)
    user_id = factory.SelfAttribute("user.id")
    issued_by_id = factory.SelfAttribute("issued_by.id")
    restriction_type = RestrictionType.READ_ONLY
    reason = "Spam"
    restricted_until = None
    revoked_at = None
