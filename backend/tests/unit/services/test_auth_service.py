from __future__ import annotations

import hashlib
from datetime import timedelta

import pytest

from forum.models.base import utcnow
from forum.models.moderation import RestrictionType
from forum.models.session import UserSession
from forum.services._shared.base import ServiceContext
from forum.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from forum.services._shared.ports.denylist_store import InMemoryDenylistStore
from forum.services._shared.ports.token_provider import StubTokenProvider
from forum.services.auth import (
    AuthService,
    ClientInfo,
    GuestJoinIn,
    JoinIn,
    LoginIn,
    LogoutIn,
    PasswordChangeIn,
    RefreshIn,
)
from tests.factories.moderation import UserRestrictionFactory
from tests.factories.user import UserFactory


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def tokens() -> StubTokenProvider:
    return StubTokenProvider()


@pytest.fixture()
def denylist() -> InMemoryDenylistStore:
    return InMemoryDenylistStore()


@pytest.fixture()
def make_service(tokens, denylist):
    """Build AuthService instances wired to in-memory doubles, optionally with a context."""

    def _make(ctx: ServiceContext | None = None) -> AuthService:
        return AuthService(token_provider=tokens, denylist_store=denylist, ctx=ctx)

    return _make


@pytest.fixture()
def service(make_service) -> AuthService:
    return make_service()


@pytest.fixture()
def member(session):
    user = UserFactory(email="member@example.com", password="correct-horse")
    session.commit()
    return user


def _ctx_for(service: AuthService, access_token: str) -> ServiceContext:
    claims = service.tokens.decode(access_token)
    return ServiceContext(
        actor_id=int(claims["sub"]),
        session_id=int(claims["sid"]),
        scopes=tuple(claims["scopes"]),
    )


def _logout_in(service: AuthService, access_token: str) -> LogoutIn:
    return LogoutIn(
        jti=service.tokens.get_jti(access_token),
        expires_at=service.tokens.get_expires_at(access_token),
    )


# ------------------------------ Join / login ------------------------------- #
def test_join_creates_member_and_first_session(service, session):
    out = service.join(
        JoinIn(
            email="New.User@Example.com",
            username="NewUser",
            password="long-enough-1",
            client=ClientInfo(user_agent="pytest", ip="10.0.0.1", client_platform="web"),
        )
    )

    assert out.user.email == "new.user@example.com"
    assert out.user.role == "member"
    assert out.token.access_token.startswith("access.")
    assert out.token.refresh_token.startswith("refresh.")

    claims = service.tokens.decode(out.token.access_token)
    assert claims["scopes"] == ["member"]
    row = session.get(UserSession, claims["sid"])
    assert row.user_id == out.user.id
    assert row.client_platform == "web"
    assert row.hashed_token == hashlib.sha256(out.token.refresh_token.encode()).hexdigest()


def test_join_rejects_taken_email_and_username(service, member):
    with pytest.raises(ConflictError):
        service.join(JoinIn(email="MEMBER@example.com", username="fresh", password="long-enough-1"))
    with pytest.raises(ConflictError):
        service.join(
            JoinIn(
                email="other@example.com",
                username=member.username.upper(),
                password="long-enough-1",
            )
        )


def test_login_issues_admin_scope_for_admins(service, session):
    admin = UserFactory(admin=True, password="admin-pass-1")
    session.commit()

    out = service.login(LoginIn(email=admin.email, password="admin-pass-1"))

    assert service.tokens.decode(out.token.access_token)["scopes"] == ["member", "admin"]
    assert out.user.last_login_at is not None


def test_login_invalid_credentials(service, member):
    with pytest.raises(AuthenticationError) as exc:
        service.login(LoginIn(email=member.email, password="wrong"))
    assert exc.value.code == "invalid_credentials"

    with pytest.raises(AuthenticationError):
        service.login(LoginIn(email="missing@example.com", password="x"))


def test_login_refused_for_deactivated_account(service, member, session):
    member.mark_deleted()
    session.commit()

    with pytest.raises(AuthenticationError):
        service.login(LoginIn(email=member.email, password="correct-horse"))


def test_login_refused_while_suspended(service, member, session):
    UserRestrictionFactory(user=member, restriction_type=RestrictionType.SUSPENDED)
    session.commit()

    with pytest.raises(AuthorizationError) as exc:
        service.login(LoginIn(email=member.email, password="correct-horse"))
    assert exc.value.code == "account_suspended"


def test_read_only_restriction_still_allows_login(service, member, session):
    UserRestrictionFactory(user=member, restriction_type=RestrictionType.READ_ONLY)
    session.commit()

    assert service.login(LoginIn(email=member.email, password="correct-horse")).user.id == member.id


# ------------------------------ Refresh ------------------------------------ #
def test_refresh_rotates_and_detects_reuse(service, member, session):
    first = service.login(LoginIn(email=member.email, password="correct-horse")).token

    second = service.refresh(RefreshIn(refresh_token=first.refresh_token))
    assert second.refresh_token != first.refresh_token

    # Replaying the rotated token revokes the whole session.
    with pytest.raises(AuthenticationError) as exc:
        service.refresh(RefreshIn(refresh_token=first.refresh_token))
    assert exc.value.code == "refresh_token_reused"

    sid = service.tokens.decode(second.refresh_token)["sid"]
    assert session.get(UserSession, sid).revoked_at is not None

    with pytest.raises(AuthenticationError) as exc:
        service.refresh(RefreshIn(refresh_token=second.refresh_token))
    assert exc.value.code == "session_inactive"


def test_refresh_rejects_access_tokens_and_garbage(service, member):
    pair = service.login(LoginIn(email=member.email, password="correct-horse")).token

    with pytest.raises(AuthenticationError):
        service.refresh(RefreshIn(refresh_token=pair.access_token))
    with pytest.raises(AuthenticationError) as exc:
        service.refresh(RefreshIn(refresh_token="garbage"))
    assert exc.value.code == "invalid_token"


def test_refresh_refused_after_suspension(service, member, session):
    pair = service.login(LoginIn(email=member.email, password="correct-horse")).token
    UserRestrictionFactory(user=member, restriction_type=RestrictionType.SUSPENDED)
    session.commit()

    with pytest.raises(AuthorizationError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


# ------------------------------ Logout ------------------------------------- #
def test_logout_denylists_access_token_and_revokes_session(make_service, member, session):
    service = make_service()
    pair = service.login(LoginIn(email=member.email, password="correct-horse")).token
    claims = service.tokens.decode(pair.access_token)
    assert service.is_token_revoked(claims) is False

    scoped = make_service(_ctx_for(service, pair.access_token))
    scoped.logout(_logout_in(service, pair.access_token))

    assert scoped.denylist.is_revoked(claims["jti"]) is True
    assert session.get(UserSession, claims["sid"]).revoked_at is not None
    assert service.is_token_revoked(claims) is True

    # Logging out again is harmless.
    scoped.logout(_logout_in(service, pair.access_token))


def test_logout_all_revokes_every_session(make_service, member, session):
    service = make_service()
    a = service.login(LoginIn(email=member.email, password="correct-horse")).token
    b = service.login(LoginIn(email=member.email, password="correct-horse")).token

    make_service(_ctx_for(service, a.access_token)).logout_all(_logout_in(service, a.access_token))

    other_claims = service.tokens.decode(b.access_token)
    assert service.is_token_revoked(other_claims) is True
    with pytest.raises(AuthenticationError):
        service.refresh(RefreshIn(refresh_token=b.refresh_token))


def test_logout_requires_member(service):
    with pytest.raises(AuthenticationError):
        service.logout(LogoutIn(jti="x", expires_at=utcnow() + timedelta(minutes=5)))


# --------------------------- Password change ------------------------------- #
def test_change_password_keeps_current_session_only(make_service, member, session):
    service = make_service()
    current = service.login(LoginIn(email=member.email, password="correct-horse")).token
    other = service.login(LoginIn(email=member.email, password="correct-horse")).token

    scoped = make_service(_ctx_for(service, current.access_token))
    scoped.change_password(
        PasswordChangeIn(current_password="correct-horse", new_password="brand-new-pass")
    )

    assert service.is_token_revoked(service.tokens.decode(current.access_token)) is False
    assert service.is_token_revoked(service.tokens.decode(other.access_token)) is True
    assert service.login(LoginIn(email=member.email, password="brand-new-pass")).user.id == member.id


def test_change_password_checks_current_password(make_service, member):
    service = make_service()
    pair = service.login(LoginIn(email=member.email, password="correct-horse")).token

    with pytest.raises(ValidationError) as exc:
        make_service(_ctx_for(service, pair.access_token)).change_password(
            PasswordChangeIn(current_password="nope", new_password="brand-new-pass")
        )
    assert exc.value.code == "invalid_current_password"


# ------------------------------ Sessions ----------------------------------- #
def test_sessions_are_listed_for_their_owner_only(make_service, member, session):
    service = make_service()
    pair = service.login(LoginIn(email=member.email, password="correct-horse")).token
    ctx = _ctx_for(service, pair.access_token)
    stranger = UserFactory()
    session.commit()

    listing = make_service(ctx).list_sessions()
    assert listing.meta.total == 1
    assert listing.items[0].is_current is True
    assert listing.items[0].is_active is True

    with pytest.raises(NotFoundError):
        make_service(ServiceContext(actor_id=stranger.id, scopes=("member",))).get_session(
            ctx.session_id
        )

    make_service(ctx).revoke_session(ctx.session_id)
    assert make_service(ctx).get_session(ctx.session_id).is_active is False


# ------------------------------ Guests ------------------------------------- #
def test_guest_join_is_idempotent_per_device(service):
    first = service.guest_join(GuestJoinIn(device_fingerprint="device-0001", user_agent="ua/1"))
    second = service.guest_join(GuestJoinIn(device_fingerprint="device-0001", user_agent="ua/2"))

    assert first.guest_id == second.guest_id
    claims = service.tokens.decode(second.access_token)
    assert claims["role"] == "guest"
    assert claims["scopes"] == ["guest"]
    assert service.is_token_revoked(claims) is False


def test_guest_token_denylisted_after_revocation(service, denylist):
    out = service.guest_join(GuestJoinIn(device_fingerprint="device-0002"))
    claims = service.tokens.decode(out.access_token)

    denylist.revoke_jti(jti=claims["jti"], expires_at=utcnow() + timedelta(minutes=5))

    assert service.is_token_revoked(claims) is True


def test_is_token_revoked_for_unknown_session(service):
    assert service.is_token_revoked({"jti": "j", "sub": "999", "sid": 12345}) is True
    assert service.is_token_revoked({"jti": "j", "sub": "not-a-number", "sid": 1}) is True
