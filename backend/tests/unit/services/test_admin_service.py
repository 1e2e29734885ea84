from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time

from forum.models.base import utcnow
from forum.models.moderation import RestrictionType
from forum.models.session import UserSession
from forum.models.user import User, UserRole
from forum.repositories.moderation import UserRestrictionRepository
from forum.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from forum.services._shared.policies.moderation import ensure_can_login
from forum.services.admin import (
    AdminService,
    ReservedTermCreateIn,
    RestrictionCreateIn,
    RestrictionSearchIn,
    UserSearchIn,
)
from tests.factories.community import ReservedTermFactory
from tests.factories.moderation import UserRestrictionFactory
from tests.factories.session import UserSessionFactory
from tests.factories.user import UserFactory
from tests.helpers.auth import member_ctx


@pytest.fixture()
def admin(session):
    user = UserFactory(admin=True)
    session.commit()
    return user


@pytest.fixture()
def target(session):
    user = UserFactory(username="troublemaker")
    session.commit()
    return user


@pytest.fixture()
def service(admin) -> AdminService:
    return AdminService(ctx=member_ctx(admin))


def test_members_are_not_admins(target):
    with pytest.raises(AuthorizationError) as exc:
        AdminService(ctx=member_ctx(target)).list_users(UserSearchIn())
    assert exc.value.code == "admin_required"


# ------------------------------ Users -------------------------------------- #
def test_list_and_get_users_including_deactivated(service, target, session):
    target.mark_deleted()
    session.commit()

    listing = service.list_users(UserSearchIn(q="trouble"))
    assert [u.id for u in listing.items] == [target.id]
    assert service.get_user(target.id).deleted_at is not None

    with pytest.raises(NotFoundError):
        service.get_user(999_999)


def test_assign_role_without_http_scope(target, session):
    out = AdminService().assign_role(target.email.upper(), UserRole.ADMIN)

    assert out.role == "admin"
    assert session.get(User, target.id).role is UserRole.ADMIN
    with pytest.raises(NotFoundError):
        AdminService().assign_role("ghost@example.com", UserRole.ADMIN)


# --------------------------- Restrictions ---------------------------------- #
def test_suspension_revokes_sessions_and_blocks_login(service, target, session):
    open_session = UserSessionFactory(user=target)
    session.commit()

    out = service.create_restriction(
        RestrictionCreateIn(user_id=target.id, restriction_type="suspended", reason="Abuse")
    )

    assert out.is_active is True
    assert out.issued_by_id == service.ctx.actor_id
    assert session.get(UserSession, open_session.id).revoked_at is not None
    with pytest.raises(AuthorizationError):
        ensure_can_login(UserRestrictionRepository(session), target.id, utcnow())


def test_read_only_restriction_keeps_sessions(service, target, session):
    open_session = UserSessionFactory(user=target)
    session.commit()

    until = utcnow() + timedelta(days=3)
    out = service.create_restriction(
        RestrictionCreateIn(user_id=target.id, restriction_type="read_only", restricted_until=until)
    )

    assert out.restriction_type == "read_only"
    assert session.get(UserSession, open_session.id).revoked_at is None


@pytest.mark.parametrize(
    "restriction_type, until, code",
    [
        ("banned", None, "invalid_restriction_type"),
        ("read_only", timedelta(minutes=-1), "invalid_restricted_until"),
    ],
)
def test_restriction_validation(service, target, restriction_type, until, code):
    restricted_until = utcnow() + until if until is not None else None
    with pytest.raises(ValidationError) as exc:
        service.create_restriction(
            RestrictionCreateIn(
                user_id=target.id, restriction_type=restriction_type, restricted_until=restricted_until
            )
        )
    assert exc.value.code == code


def test_admin_cannot_restrict_self(service, admin):
    with pytest.raises(ValidationError) as exc:
        service.create_restriction(RestrictionCreateIn(user_id=admin.id, restriction_type="read_only"))
    assert exc.value.code == "self_restriction"


def test_revoke_restriction_is_idempotent(service, target, session):
    restriction = UserRestrictionFactory(user=target)
    session.commit()

    first = service.revoke_restriction(restriction.id)
    second = service.revoke_restriction(restriction.id)

    assert first.is_active is False
    assert second.revoked_at == first.revoked_at
    assert service.get_restriction(restriction.id).is_active is False


def test_list_restrictions_filters_by_activity(service, target, session):
    active = UserRestrictionFactory(user=target)
    UserRestrictionFactory(user=target, revoked_at=utcnow() - timedelta(hours=1))
    UserRestrictionFactory(
        user=target,
        restriction_type=RestrictionType.SUSPENDED,
        restricted_until=utcnow() - timedelta(days=1),
    )
    session.commit()

    listing = service.list_restrictions(RestrictionSearchIn(user_id=target.id, active=True))
    everything = service.list_restrictions(RestrictionSearchIn(user_id=target.id))

    assert [r.id for r in listing.items] == [active.id]
    assert everything.meta.total == 3


# --------------------------- Reserved terms -------------------------------- #
def test_reserved_terms_crud(service, session):
    ReservedTermFactory(term="admin")
    session.commit()

    created = service.create_reserved_term(ReservedTermCreateIn(term="Moderators"))
    assert created.term == "Moderators"

    with pytest.raises(ConflictError):
        service.create_reserved_term(ReservedTermCreateIn(term="ADMIN"))
    with pytest.raises(ValidationError):
        service.create_reserved_term(ReservedTermCreateIn(term="   "))

    listing = service.list_reserved_terms()
    assert [t.term for t in listing.items] == ["admin", "Moderators"]

    service.delete_reserved_term(created.id)
    with pytest.raises(NotFoundError):
        service.delete_reserved_term(created.id)


def test_temporary_restriction_lapses(service, target):
    until = utcnow() + timedelta(days=1)
    out = service.create_restriction(
        RestrictionCreateIn(user_id=target.id, restriction_type="suspended", restricted_until=until)
    )
    assert out.is_active is True

    with freeze_time(until + timedelta(minutes=1)):
        assert service.get_restriction(out.id).is_active is False
        listing = service.list_restrictions(RestrictionSearchIn(user_id=target.id, active=True))
        assert listing.meta.total == 0
