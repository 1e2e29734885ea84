"""Commit and rollback behaviour of the read-write unit of work."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from forum.models.community import Community, CommunityCategory
from forum.models.user import User
from forum.uow import SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


def _rows(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


class Boom(Exception):
    pass


class TestSQLAlchemyUnitOfWork:
    def test_clean_exit_commits(self, session):
        before = _rows(session, User)

        with SQLAlchemyUnitOfWork() as uow:
            user = uow.users.add(UserFactory.build(username="committed"))

        assert _rows(session, User) == before + 1
        assert session.get(User, user.id).username == "committed"

    def test_exception_rolls_back_and_propagates(self, session):
        before = _rows(session, User)

        with pytest.raises(Boom), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            raise Boom

        assert _rows(session, User) == before

    def test_repositories_share_one_transaction(self, session):
        """A failure after writes through two repositories undoes both."""
        users_before = _rows(session, User)
        communities_before = _rows(session, Community)

        with pytest.raises(Boom), SQLAlchemyUnitOfWork() as uow:
            owner = uow.users.add(UserFactory.build())
            uow.communities.add(
                Community(owner_id=owner.id, name="atomic", category=CommunityCategory.GAMES)
            )
            raise Boom

        assert _rows(session, User) == users_before
        assert _rows(session, Community) == communities_before
