from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Literal, Protocol

TokenKind = Literal["access", "refresh"]


class TokenDecodeError(Exception):
    """Token is malformed, has a bad signature or is expired."""


class TokenProvider(Protocol):
    """
    Port for minting and reading the bearer tokens handed to clients.

    Access tokens carry ``role`` and ``scopes`` plus ``sid`` (member session)
    or ``gid`` (guest visitor); refresh tokens carry ``sid`` and a jti chosen
    by the caller so the session row can store its digest.
    """

    def issue(
        self,
        kind: TokenKind,
        *,
        subject: int | str,
        claims: dict[str, Any],
        ttl: timedelta,
        jti: str | None = None,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]:
        """:raises TokenDecodeError: If the token cannot be trusted."""
        ...

    def get_jti(self, token: str) -> str: ...

    def get_expires_at(self, token: str) -> datetime: ...


class ClaimsReaderMixin:
    """``get_jti``/``get_expires_at`` derived from ``decode``."""

    def decode(self, token: str) -> dict[str, Any]:  # pragma: no cover - overridden
        raise NotImplementedError

    def get_jti(self, token: str) -> str:
        return str(self.decode(token)["jti"])

    def get_expires_at(self, token: str) -> datetime:
        return datetime.fromtimestamp(int(self.decode(token)["exp"]), tz=UTC)


class StubTokenProvider(ClaimsReaderMixin):
    """In-memory provider for unit tests.

    Tokens read ``<kind>.<subject>.<jti>.<seq>`` and decode by lookup, so
    anything not issued here raises :class:`TokenDecodeError`.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def issue(
        self,
        kind: TokenKind,
        *,
        subject: int | str,
        claims: dict[str, Any],
        ttl: timedelta,
        jti: str | None = None,
    ) -> str:
        self._seq += 1
        jti = jti or f"jti-{self._seq}"
        token = f"{kind}.{subject}.{jti}.{self._seq}"
        self._issued[token] = {
            **claims,
            "sub": str(subject),
            "type": kind,
            "jti": jti,
            "exp": int((datetime.now(tz=UTC) + ttl).timestamp()),
        }
        return token

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return self._issued[token]
        except KeyError as exc:
            raise TokenDecodeError("Unknown token.") from exc
