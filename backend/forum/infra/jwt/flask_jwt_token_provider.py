from __future__ import annotations

from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from forum.services._shared.ports.token_provider import (
    ClaimsReaderMixin,
    TokenDecodeError,
    TokenKind,
)


class JWTTokenProvider(ClaimsReaderMixin):
    """
    Signs tokens with Flask-JWT-Extended using the app's ``JWT_*`` settings.

    Needs an application context. A caller-supplied ``jti`` is passed as a
    claim override, which Flask-JWT-Extended applies after its own claims.
    """

    def issue(
        self,
        kind: TokenKind,
        *,
        subject: int | str,
        claims: dict[str, Any],
        ttl: timedelta,
        jti: str | None = None,
    ) -> str:
        extra = dict(claims)
        if jti is not None:
            extra["jti"] = jti
        create = create_access_token if kind == "access" else create_refresh_token
        token = cast(str, create(identity=str(subject), additional_claims=extra, expires_delta=ttl))
        if jti is not None and self.get_jti(token) != jti:
            raise RuntimeError(f"{kind} token was minted with an unexpected jti")
        return token

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException) as exc:
            raise TokenDecodeError(str(exc)) from exc
