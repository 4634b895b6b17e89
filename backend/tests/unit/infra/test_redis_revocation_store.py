"""
Unit tests for RedisRevocationStore using fakeredis.

They exercise revoke/is_revoked idempotency, native TTL expiry and the key
layout (tokens are stored hashed).
"""

from __future__ import annotations

from datetime import timedelta

import fakeredis
import pytest

from sherp_auth.infra.redis.redis_revocation_store import RedisRevocationStore


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisRevocationStore(fake_redis)


def test_revoke_and_check(store):
    assert store.is_revoked("rt-1") is False
    assert store.revoke("rt-1") is True
    assert store.is_revoked("rt-1") is True
    assert store.is_revoked("rt-2") is False


def test_revoke_is_idempotent_and_keeps_first_ttl(store, fake_redis):
    store.revoke("rt-1")
    key = store._k("rt-1")
    fake_redis.expire(key, 100)

    assert store.revoke("rt-1") is False
    assert fake_redis.ttl(key) <= 100


def test_ttl_matches_retention(store, fake_redis):
    store.revoke("rt-1")
    ttl = fake_redis.ttl(store._k("rt-1"))
    assert timedelta(days=7).total_seconds() - 5 <= ttl <= timedelta(days=7).total_seconds()


def test_custom_retention(fake_redis):
    store = RedisRevocationStore(fake_redis, retention=timedelta(hours=1))
    store.revoke("rt-1")
    assert 3590 <= fake_redis.ttl(store._k("rt-1")) <= 3600


def test_token_value_is_not_stored_verbatim(store, fake_redis):
    store.revoke("secret-refresh-token")
    keys = [k.decode() for k in fake_redis.keys("*")]
    assert len(keys) == 1
    assert "secret-refresh-token" not in keys[0]
    assert keys[0].startswith("deny:rt:")


def test_expired_key_is_not_revoked(store, fake_redis):
    store.revoke("rt-1")
    fake_redis.delete(store._k("rt-1"))  # what Redis does when the TTL elapses
    assert store.is_revoked("rt-1") is False
    assert store.revoke("rt-1") is True


def test_purge_is_a_noop(store):
    store.revoke("rt-1")
    assert store.purge_expired() == 0
    assert store.is_revoked("rt-1") is True
