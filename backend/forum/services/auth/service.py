from __future__ import annotations

import hashlib
import hmac
import logging
import uuid
from typing import Any

from sqlalchemy.exc import IntegrityError

from forum.models.session import GuestVisitor, UserSession
from forum.models.user import User, UserRole
from forum.services._shared.base import BaseService, ServiceContext
from forum.services._shared.dto import PageMeta
from forum.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from forum.services._shared.policies.moderation import ensure_can_login
from forum.services._shared.ports.denylist_store import TokenDenylistStore
from forum.services._shared.ports.token_provider import TokenDecodeError, TokenProvider
from forum.services.identity._converters import user_to_private

from ._converters import session_to_out
from .dto import (
    AuthorizedOut,
    AuthTokenConfig,
    ClientInfo,
    GuestJoinIn,
    GuestTokenOut,
    JoinIn,
    LoginIn,
    LogoutIn,
    PasswordChangeIn,
    RefreshIn,
    SessionListOut,
    SessionOut,
    TokenPairOut,
)

logger = logging.getLogger(__name__)

REFRESH_TOKEN_TYPE = "refresh"
GUEST_ROLE = "guest"


def _digest(token: str) -> str:
    """Hex SHA-256 of a raw refresh token (the only form persisted)."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _scopes_for(user: User) -> list[str]:
    if user.role == UserRole.ADMIN:
        return ["member", "admin"]
    return ["member"]


class AuthService(BaseService):
    """
    Authentication lifecycle service (join / login / refresh / logout).

    Login sessions are rows in ``user_sessions`` that keep only the SHA-256
    of the current refresh token. Refreshing rotates that hash; presenting a
    refresh token whose hash no longer matches is treated as reuse and
    revokes the session. Access tokens are short-lived and can be revoked
    early through the jti denylist.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        denylist_store: TokenDenylistStore,
        token_cfg: AuthTokenConfig | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param token_provider: Signs and decodes access and refresh tokens.
        :param denylist_store: Revoked access token ids, kept until the token expires.
        :param token_cfg: Token lifetimes; defaults to one hour and seven days.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.denylist = denylist_store
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Join / login
    # ------------------------------------------------------------------ #

    def join(self, dto: JoinIn) -> AuthorizedOut:
        """
        Register a member account and open its first session.

        :raises ConflictError: If the email or username is already in use.
        """
        now = self.now()
        with self.rw_uow() as uow:
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", "email already registered")
            if uow.users.exists_by_username(dto.username):
                raise ConflictError("User", "username already taken")

            user = User(
                email=dto.email,
                username=dto.username,
                display_name=dto.display_name,
                role=UserRole.MEMBER,
                last_login_at=now,
            )
            user.password = dto.password
            try:
                uow.users.add(user)
            except IntegrityError as exc:
                raise ConflictError("User", "email or username already in use") from exc

            out = self._open_session(uow, user, dto.client)
            logger.info("User joined", extra={"user_id": user.id})
            return out

    def login(self, dto: LoginIn) -> AuthorizedOut:
        """
        Authenticate credentials and open a new session.

        :raises AuthenticationError: Unknown email, wrong password or
            deactivated account.
        :raises AuthorizationError: ``account_suspended`` while a suspension
            is active.
        """
        now = self.now()
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if user is None or user.is_deleted or not user.verify_password(dto.password):
                raise AuthenticationError("Invalid credentials.", code="invalid_credentials")
            ensure_can_login(uow.restrictions, user.id, now)

            user.last_login_at = now
            out = self._open_session(uow, user, dto.client)
            logger.info("User logged in", extra={"user_id": user.id})
            return out

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate the refresh token of a session and emit a new token pair.

        :raises AuthenticationError: Invalid, expired or revoked token;
            ``refresh_token_reused`` when an already rotated token is replayed.
        """
        try:
            claims = self.tokens.decode(dto.refresh_token)
        except TokenDecodeError as exc:
            raise AuthenticationError("Invalid refresh token.", code="invalid_token") from exc

        if claims.get("type") != REFRESH_TOKEN_TYPE or claims.get("sid") is None:
            raise AuthenticationError("Refresh token required.", code="invalid_token")
        user_id = self._coerce_user_id(claims.get("sub"))
        session_id = int(claims["sid"])

        now = self.now()
        reused = False
        token: TokenPairOut | None = None
        with self.rw_uow() as uow:
            session = uow.sessions.get_for_user(session_id, user_id)
            if session is None or not session.is_active(now):
                raise AuthenticationError("Session is no longer active.", code="session_inactive")

            if not hmac.compare_digest(session.hashed_token, _digest(dto.refresh_token)):
                # Old token replayed after rotation: kill the session and commit that.
                session.revoked_at = now
                reused = True
                logger.warning(
                    "Refresh token reuse detected",
                    extra={"user_id": user_id, "session_id": session_id},
                )
            else:
                user = session.user
                if user.is_deleted:
                    raise AuthenticationError("Account deactivated.", code="account_deactivated")
                ensure_can_login(uow.restrictions, user.id, now)

                token = self._issue_pair(user, session.id)
                session.hashed_token = _digest(token.refresh_token)
                session.expires_at = now + self.cfg.refresh_expires
                session.last_seen_at = now
                if dto.client.user_agent:
                    session.user_agent = dto.client.user_agent
                if dto.client.ip:
                    session.ip = dto.client.ip
                logger.info("Session refreshed", extra={"user_id": user_id, "session_id": session_id})

        if reused or token is None:
            raise AuthenticationError(
                "Refresh token reuse detected. Please sign in again.",
                code="refresh_token_reused",
            )
        return token

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """Denylist the current access token and revoke its session (idempotent)."""
        actor_id = self.require_actor()
        self.denylist.revoke_jti(jti=dto.jti, expires_at=dto.expires_at)

        if self.ctx.session_id is None:
            return
        with self.rw_uow() as uow:
            session = uow.sessions.get_for_user(self.ctx.session_id, actor_id)
            if session is not None and session.revoked_at is None:
                session.revoked_at = self.now()
        logger.info("User logged out", extra={"user_id": actor_id, "session_id": self.ctx.session_id})

    def logout_all(self, dto: LogoutIn) -> None:
        """Denylist the current access token and revoke every session of the caller."""
        actor_id = self.require_actor()
        self.denylist.revoke_jti(jti=dto.jti, expires_at=dto.expires_at)

        with self.rw_uow() as uow:
            revoked = uow.sessions.revoke_all_for_user(actor_id, when=self.now())
        logger.info("User logged out everywhere", extra={"user_id": actor_id, "sessions_revoked": revoked})

    def change_password(self, dto: PasswordChangeIn) -> None:
        """
        Replace the caller's password and revoke their other sessions.

        :raises ValidationError: ``invalid_current_password`` on mismatch.
        """
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            user = uow.users.get_live(actor_id)
            if user is None:
                raise NotFoundError("User", actor_id)
            if not user.verify_password(dto.current_password):
                raise ValidationError(
                    "Current password is incorrect.", code="invalid_current_password"
                )
            user.password = dto.new_password
            revoked = uow.sessions.revoke_all_for_user(
                actor_id, when=self.now(), except_session_id=self.ctx.session_id
            )
        logger.info("Password changed", extra={"user_id": actor_id, "sessions_revoked": revoked})

    # ------------------------------------------------------------------ #
    # Guests
    # ------------------------------------------------------------------ #

    def guest_join(self, dto: GuestJoinIn) -> GuestTokenOut:
        """Upsert a guest visitor by device fingerprint and issue a read-only token."""
        now = self.now()
        with self.rw_uow() as uow:
            guest = uow.guests.get_by_fingerprint(dto.device_fingerprint)
            if guest is None:
                guest = GuestVisitor(device_fingerprint=dto.device_fingerprint)
                uow.guests.add(guest)
                logger.info("Guest visitor created", extra={"guest_id": guest.id})
            guest.user_agent = dto.user_agent or guest.user_agent
            guest.ip = dto.ip or guest.ip
            guest.last_seen_at = now
            guest_id = guest.id

        access = self.tokens.issue(
            "access",
            subject=f"{GUEST_ROLE}:{guest_id}",
            claims={"role": GUEST_ROLE, "scopes": [GUEST_ROLE], "gid": guest_id},
            ttl=self.cfg.access_expires,
        )
        return GuestTokenOut(
            guest_id=guest_id,
            access_token=access,
            expires_in=int(self.cfg.access_expires.total_seconds()),
        )

    # ------------------------------------------------------------------ #
    # Sessions of the caller
    # ------------------------------------------------------------------ #

    def list_sessions(self, *, page: int = 1, limit: int = 20) -> SessionListOut:
        actor_id = self.require_actor()
        pagination = self.ensure_pagination(page=page, limit=limit, sort=["-created_at"])
        now = self.now()
        with self.ro_uow() as uow:
            result = uow.sessions.list_for_user(actor_id, pagination)
            items = [
                session_to_out(row, now=now, current_session_id=self.ctx.session_id)
                for row in result.items
            ]
            return SessionListOut(
                items=items,
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    def get_session(self, session_id: int) -> SessionOut:
        """Return one of the caller's sessions; other users' sessions are not found."""
        actor_id = self.require_actor()
        with self.ro_uow() as uow:
            row = uow.sessions.get_for_user(session_id, actor_id)
            if row is None:
                raise NotFoundError("Session", session_id)
            return session_to_out(row, now=self.now(), current_session_id=self.ctx.session_id)

    def revoke_session(self, session_id: int) -> None:
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            row = uow.sessions.get_for_user(session_id, actor_id)
            if row is None:
                raise NotFoundError("Session", session_id)
            if row.revoked_at is None:
                row.revoked_at = self.now()
        logger.info("Session revoked", extra={"user_id": actor_id, "session_id": session_id})

    # ------------------------------------------------------------------ #
    # Token checks (wired as the JWT blocklist loader)
    # ------------------------------------------------------------------ #

    def is_token_revoked(self, claims: dict[str, Any]) -> bool:
        """
        Return ``True`` when an access token must be refused.

        A token is refused when its jti is denylisted, or (for member
        tokens) when its session is revoked/expired or the account is
        deactivated. Guest tokens only go through the denylist.
        """
        jti = claims.get("jti")
        if jti and self.denylist.is_revoked(str(jti)):
            return True
        if claims.get("role") == GUEST_ROLE:
            return False

        sid = claims.get("sid")
        try:
            user_id = self._coerce_user_id(claims.get("sub"))
        except AuthenticationError:
            return True
        if sid is None:
            return True

        with self.ro_uow() as uow:
            session = uow.sessions.get_for_user(int(sid), user_id)
            if session is None or not session.is_active(self.now()):
                return True
            return session.user.is_deleted

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _open_session(self, uow, user: User, client: ClientInfo) -> AuthorizedOut:
        """Persist a session row, issue its tokens and store the refresh hash."""
        now = self.now()
        session = UserSession(
            user_id=user.id,
            hashed_token="",
            user_agent=client.user_agent,
            ip=client.ip,
            client_platform=client.client_platform,
            expires_at=now + self.cfg.refresh_expires,
            last_seen_at=now,
        )
        uow.sessions.add(session)

        token = self._issue_pair(user, session.id)
        session.hashed_token = _digest(token.refresh_token)
        uow.sessions.flush()
        logger.info("Session opened", extra={"user_id": user.id, "session_id": session.id})
        return AuthorizedOut(user=user_to_private(user), token=token)

    def _issue_pair(self, user: User, session_id: int) -> TokenPairOut:
        access = self.tokens.issue(
            "access",
            subject=user.id,
            claims={"sid": session_id, "role": user.role.value, "scopes": _scopes_for(user)},
            ttl=self.cfg.access_expires,
        )
        refresh = self.tokens.issue(
            "refresh",
            subject=user.id,
            claims={"sid": session_id},
            ttl=self.cfg.refresh_expires,
            jti=uuid.uuid4().hex,
        )
        return TokenPairOut(
            access_token=access,
            refresh_token=refresh,
            expires_in=int(self.cfg.access_expires.total_seconds()),
        )

    @staticmethod
    def _coerce_user_id(subject: Any) -> int:
        """Member tokens carry the user id as ``sub``, as an int or a digit string."""
        if isinstance(subject, int):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise AuthenticationError("Invalid token subject.", code="invalid_token")
