"""
Unit tests for RedisTokenDenylistStore using fakeredis.

They use fakeredis.FakeRedis so they run entirely in-memory and integrate with pytest.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from forum.infra.redis.redis_denylist_store import RedisTokenDenylistStore
from forum.services._shared.ports import InMemoryDenylistStore


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisTokenDenylistStore(r=fake_redis)


def test_unknown_jti_is_not_revoked(store):
    assert store.is_revoked("never-seen") is False


def test_revoke_marks_jti(store):
    store.revoke_jti(jti="jti-1", expires_at=_now() + timedelta(minutes=5))

    assert store.is_revoked("jti-1") is True
    assert store.is_revoked("jti-2") is False


def test_revoke_ttl_follows_token_expiry(store, fake_redis):
    """The marker lives about as long as the token it denies."""
    store.revoke_jti(jti="jti-ttl", expires_at=_now() + timedelta(seconds=120))

    ttl = fake_redis.ttl(store.key_for("jti-ttl"))
    assert 0 < ttl <= 120


def test_revoke_expired_token_keeps_minimum_ttl(store, fake_redis):
    """Already expired tokens still get a short-lived marker instead of an error."""
    store.revoke_jti(jti="jti-old", expires_at=_now() - timedelta(minutes=1))

    assert fake_redis.ttl(store.key_for("jti-old")) == 1


def test_revoke_is_idempotent(store):
    expires_at = _now() + timedelta(minutes=5)
    store.revoke_jti(jti="jti-dup", expires_at=expires_at)
    store.revoke_jti(jti="jti-dup", expires_at=expires_at)

    assert store.is_revoked("jti-dup") is True


def test_in_memory_store_forgets_expired_entries():
    store = InMemoryDenylistStore()
    store.revoke_jti(jti="gone", expires_at=_now() - timedelta(seconds=1))
    store.revoke_jti(jti="live", expires_at=_now() + timedelta(minutes=1))

    assert store.is_revoked("gone") is False
    assert store.is_revoked("live") is True


def test_keys_are_namespaced_by_prefix(fake_redis):
    store = RedisTokenDenylistStore(fake_redis, prefix="test:deny:")
    store.revoke_jti(jti="abc", expires_at=_now() + timedelta(minutes=1))

    assert fake_redis.exists("test:deny:abc") == 1
    assert RedisTokenDenylistStore(fake_redis).is_revoked("abc") is False
