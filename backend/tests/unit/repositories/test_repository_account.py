"""Tests for user, session and restriction repositories."""

from __future__ import annotations

from datetime import timedelta

from forum.models.base import utcnow
from forum.models.moderation import RestrictionType
from forum.repositories.base import Pagination
from forum.repositories.moderation import UserRestrictionRepository
from forum.repositories.session import GuestVisitorRepository, UserSessionRepository
from forum.repositories.user import UserRepository
from tests.factories.moderation import UserRestrictionFactory
from tests.factories.session import GuestVisitorFactory, UserSessionFactory
from tests.factories.user import UserFactory


class TestUserRepository:
    def test_lookups_are_case_insensitive(self, session):
        user = UserFactory(email="ada@example.com", username="AdaL")
        repo = UserRepository(session=session)

        assert repo.get_by_email("ADA@example.com ") is user
        assert repo.exists_by_email("Ada@Example.com") is True
        assert repo.exists_by_username("adal") is True
        assert repo.exists_by_username("ADAL", exclude_id=user.id) is False

    def test_search_matches_email_or_username(self, session):
        by_email = UserFactory(email="grace.hopper@example.com")
        by_username = UserFactory(username="hopperfan")
        UserFactory(email="someone@example.com", username="someone")
        repo = UserRepository(session=session)

        page = repo.search(Pagination(page=1, limit=10, sort=["id"]), q="hopper")

        assert [u.id for u in page.items] == [by_email.id, by_username.id]
        assert page.total == 2


class TestUserSessionRepository:
    def test_get_for_user_checks_owner(self, session):
        row = UserSessionFactory()
        other = UserFactory()
        repo = UserSessionRepository(session=session)

        assert repo.get_for_user(row.id, row.user_id) is row
        assert repo.get_for_user(row.id, other.id) is None

    def test_revoke_all_for_user_keeps_excluded_session(self, session):
        user = UserFactory()
        current = UserSessionFactory(user=user)
        others = [UserSessionFactory(user=user) for _ in range(2)]
        foreign = UserSessionFactory()
        repo = UserSessionRepository(session=session)

        revoked = repo.revoke_all_for_user(user.id, when=utcnow(), except_session_id=current.id)

        assert revoked == 2
        assert current.revoked_at is None
        assert all(s.revoked_at is not None for s in others)
        assert foreign.revoked_at is None

    def test_guest_lookup_by_fingerprint(self, session):
        guest = GuestVisitorFactory(device_fingerprint="device-abc-123")
        repo = GuestVisitorRepository(session=session)

        assert repo.get_by_fingerprint("device-abc-123") is guest
        assert repo.get_by_fingerprint("unknown-device") is None


class TestUserRestrictionRepository:
    def test_has_active_honours_type_and_expiry(self, session):
        now = utcnow()
        user = UserFactory()
        UserRestrictionFactory(user=user, restriction_type=RestrictionType.READ_ONLY)
        UserRestrictionFactory(
            user=user,
            restriction_type=RestrictionType.SUSPENDED,
            restricted_until=now - timedelta(minutes=1),
        )
        repo = UserRestrictionRepository(session=session)

        assert repo.has_active(user.id, now) is True
        assert repo.has_active(user.id, now, restriction_type=RestrictionType.SUSPENDED) is False

    def test_search_by_activity(self, session):
        now = utcnow()
        user = UserFactory()
        active = UserRestrictionFactory(user=user)
        revoked = UserRestrictionFactory(user=user, revoked_at=now)
        repo = UserRestrictionRepository(session=session)
        pagination = Pagination(page=1, limit=10, sort=["-created_at"])

        active_page = repo.search(pagination, now=now, user_id=user.id, active=True)
        inactive_page = repo.search(pagination, now=now, user_id=user.id, active=False)

        assert [r.id for r in active_page.items] == [active.id]
        assert [r.id for r in inactive_page.items] == [revoked.id]
