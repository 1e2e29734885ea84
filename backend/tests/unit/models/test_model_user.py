"""Unit tests for :class:`forum.models.user.User`."""

from __future__ import annotations

import pytest

from forum.models.user import User, UserRole
from tests.factories.user import UserFactory


class TestUserModel:
    def test_password_is_hashed_and_verifiable(self, session):
        user = UserFactory(password="s3cret-pass")

        assert user.password_hash != "s3cret-pass"
        assert user.verify_password("s3cret-pass") is True
        assert user.verify_password("wrong") is False

    def test_password_is_write_only(self):
        with pytest.raises(AttributeError):
            _ = User().password

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            User().password = ""

    def test_email_is_normalized(self, session):
        user = UserFactory(email="  Mixed.Case@Example.COM ")

        assert user.email == "mixed.case@example.com"

    def test_malformed_email_rejected(self):
        with pytest.raises(ValueError):
            User(email="not-an-email")

    def test_username_keeps_casing_and_sets_key(self, session):
        user = UserFactory(username="RedPanda")

        assert user.username == "RedPanda"
        assert user.username_key == "redpanda"

    def test_admin_trait_sets_role(self, session):
        assert UserFactory(admin=True).is_admin is True
        assert UserFactory().role == UserRole.MEMBER

    def test_soft_delete_marks_once(self, session):
        user = UserFactory()
        user.mark_deleted()
        first = user.deleted_at
        user.mark_deleted()

        assert user.is_deleted is True
        assert user.deleted_at == first
