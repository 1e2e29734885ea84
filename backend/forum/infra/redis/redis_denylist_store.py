from __future__ import annotations

from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]


class RedisTokenDenylistStore:
    """
    Revoked access-token jtis kept in Redis so every worker sees a logout.

    A revocation is a marker key that expires together with the token it
    denies; suspended users' and logged-out sessions' tokens simply age out.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "forum:denylist:") -> None:
        self.r = r
        self.prefix = prefix

    def key_for(self, jti: str) -> str:
        return f"{self.prefix}{jti}"

    def is_revoked(self, jti: str) -> bool:
        return bool(self.r.exists(self.key_for(jti)))

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        remaining = int((expires_at - datetime.now(UTC)).total_seconds())
        # SET EX rejects zero; an already expired token still gets a one-second marker.
        self.r.set(self.key_for(jti), b"1", ex=max(1, remaining))
