"""Factory Boy definitions for login sessions and guest visitors."""

from __future__ import annotations

import hashlib
from datetime import timedelta

import factory

from forum.models.base import utcnow
from forum.models.session import GuestVisitor, UserSession
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class UserSessionFactory(BaseFactory):
    """Open session expiring in a week; ``hashed_token`` matches no real token."""

    class Meta:
        model = UserSession

    user = factory.SubFactory(UserFactory)
    user_id = factory.SelfAttribute("user.id")
    hashed_token = factory.Sequence(lambda n: hashlib.sha256(f"token-{n}".encode()).hexdigest())
    user_agent = "pytest"
    ip = "127.0.0.1"
    client_platform = None
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=7))
    last_seen_at = None
    revoked_at = None


class GuestVisitorFactory(BaseFactory):
    class Meta:
        model = GuestVisitor

    device_fingerprint = factory.Sequence(lambda n: f"device-{n:04d}")
