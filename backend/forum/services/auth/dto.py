"""Inputs and results of the join, login, refresh and guest flows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from forum.services._shared.dto import PageMeta
from forum.services.identity.dto import UserPrivateOut


@dataclass(frozen=True, slots=True)
class ClientInfo:
    """
    Client hints recorded on the session row.

    :param user_agent: ``User-Agent`` header.
    :param ip: Remote address (after ProxyFix).
    :param client_platform: Free-form platform label sent by the client.
    """

    user_agent: str | None = None
    ip: str | None = None
    client_platform: str | None = None


@dataclass(frozen=True, slots=True)
class JoinIn:
    """``password`` is the raw 8-128 character secret; ``client`` describes the first session."""

    email: str
    username: str
    password: str
    display_name: str | None = None
    client: ClientInfo = ClientInfo()


@dataclass(frozen=True, slots=True)
class LoginIn:
    email: str
    password: str
    client: ClientInfo = ClientInfo()


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """Rotation request; ``client`` refreshes the hints stored on the session."""

    refresh_token: str
    client: ClientInfo = ClientInfo()


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Current access token identity, denylisted on logout.

    :param jti: Access token id.
    :param expires_at: Access token expiry (denylist TTL).
    """

    jti: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    current_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class GuestJoinIn:
    """``device_fingerprint`` is the stable id the client generates once per device."""

    device_fingerprint: str
    user_agent: str | None = None
    ip: str | None = None


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Access and refresh tokens for a member session.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    :param expires_in: Access token lifetime in seconds.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


@dataclass(frozen=True, slots=True)
class AuthorizedOut:
    """Authenticated member with the tokens of their new session."""

    user: UserPrivateOut
    token: TokenPairOut


@dataclass(frozen=True, slots=True)
class GuestTokenOut:
    guest_id: int
    access_token: str
    expires_in: int
    token_type: str = "bearer"


@dataclass(frozen=True, slots=True)
class SessionOut:
    """Login session as shown to its owner."""

    id: int
    user_agent: str | None
    ip: str | None
    client_platform: str | None
    created_at: datetime
    expires_at: datetime
    last_seen_at: datetime | None
    revoked_at: datetime | None
    is_active: bool
    is_current: bool


@dataclass(frozen=True, slots=True)
class SessionListOut:
    items: list[SessionOut]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """Lifetimes of access tokens and of refresh tokens (which also bound the session)."""

    access_expires: timedelta = timedelta(hours=1)
    refresh_expires: timedelta = timedelta(days=7)
