"""
Unit tests for RedisTokenDenylistStore using fakeredis.

They use fakeredis.FakeRedis so they run entirely in-memory.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from authflow.infra.redis.redis_denylist_store import RedisTokenDenylistStore


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisTokenDenylistStore(fake_redis)


def test_unknown_jti_is_not_revoked(store):
    assert store.is_revoked("nope") is False


def test_revoke_marks_jti_with_remaining_lifetime_as_ttl(store, fake_redis):
    store.revoke_jti(jti="abc", expires_at=datetime.now(UTC) + timedelta(minutes=5))

    assert store.is_revoked("abc") is True
    ttl = fake_redis.ttl("deny:at:abc")
    assert 0 < ttl <= 300


def test_revoke_is_idempotent(store):
    exp = datetime.now(UTC) + timedelta(minutes=5)
    store.revoke_jti(jti="abc", expires_at=exp)
    store.revoke_jti(jti="abc", expires_at=exp)

    assert store.is_revoked("abc") is True


def test_already_expired_token_is_not_stored(store, fake_redis):
    store.revoke_jti(jti="old", expires_at=datetime.now(UTC) - timedelta(seconds=10))

    assert store.is_revoked("old") is False
    assert fake_redis.exists("deny:at:old") == 0


def test_custom_prefix(fake_redis):
    store = RedisTokenDenylistStore(fake_redis, prefix="t:")
    store.revoke_jti(jti="abc", expires_at=datetime.now(UTC) + timedelta(minutes=1))

    assert fake_redis.exists("t:abc") == 1


def test_token_with_under_a_second_left_is_still_denied(store, fake_redis):
    store.revoke_jti(jti="edge", expires_at=datetime.now(UTC) + timedelta(milliseconds=400))

    assert store.is_revoked("edge") is True
    assert fake_redis.ttl("deny:at:edge") == 1
