"""Authentication lifecycle: join, login, refresh rotation, logout, guests."""

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
from .service import AuthService

__all__ = [
    "AuthService",
    "AuthTokenConfig",
    "AuthorizedOut",
    "ClientInfo",
    "GuestJoinIn",
    "GuestTokenOut",
    "JoinIn",
    "LoginIn",
    "LogoutIn",
    "PasswordChangeIn",
    "RefreshIn",
    "SessionListOut",
    "SessionOut",
    "TokenPairOut",
]
