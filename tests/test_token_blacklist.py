"""Revocation store behaviour against fakeredis and an unreachable server."""

import asyncio

import pytest
from redis.exceptions import RedisError

from conftest import UnavailableRedis
from keyward.domain.models import IdentityScope
from keyward.infrastructure.cache.token_blacklist import TokenBlacklistStore


@pytest.fixture
def store(redis_client) -> TokenBlacklistStore:
    return TokenBlacklistStore(redis_client)


@pytest.mark.asyncio
async def test_blacklisted_token_is_reported(store, redis_client):
    await store.blacklist_token("token-abc", 60)

    assert await store.is_token_blacklisted("token-abc") is True
    assert await store.is_token_blacklisted("token-other") is False
    assert await redis_client.get("blacklist:token:token-abc") == "1"
    assert 0 < await redis_client.ttl("blacklist:token:token-abc") <= 60


@pytest.mark.asyncio
async def test_identity_namespaces_are_independent(store):
    await store.blacklist_identity_tokens("shared-id", IdentityScope.USER, 60)

    assert await store.is_identity_blacklisted("shared-id", IdentityScope.USER) is True
    assert await store.is_identity_blacklisted("shared-id", IdentityScope.ADMIN) is False


@pytest.mark.asyncio
async def test_identity_revocation_expires_after_ttl(store):
    await store.blacklist_identity_tokens("user-1", IdentityScope.USER, 1)

    assert await store.is_identity_blacklisted("user-1", IdentityScope.USER) is True

    await asyncio.sleep(1.2)

    assert await store.is_identity_blacklisted("user-1", IdentityScope.USER) is False


@pytest.mark.asyncio
async def test_clear_identity_blacklist(store):
    await store.blacklist_identity_tokens("admin-1", IdentityScope.ADMIN, 60)
    await store.clear_identity_blacklist("admin-1", IdentityScope.ADMIN)

    assert await store.is_identity_blacklisted("admin-1", IdentityScope.ADMIN) is False


@pytest.mark.asyncio
async def test_non_positive_ttl_writes_nothing(store, redis_client):
    await store.blacklist_token("already-expired", 0)
    await store.blacklist_identity_tokens("user-2", IdentityScope.USER, -5)

    assert await redis_client.exists("blacklist:token:already-expired") == 0
    assert await store.is_identity_blacklisted("user-2", IdentityScope.USER) is False


@pytest.mark.asyncio
async def test_reads_fail_open_when_store_is_unreachable():
    store = TokenBlacklistStore(UnavailableRedis())

    assert await store.is_token_blacklisted("any-token") is False
    assert await store.is_identity_blacklisted("user-1", IdentityScope.USER) is False


@pytest.mark.asyncio
async def test_writes_propagate_store_errors():
    store = TokenBlacklistStore(UnavailableRedis())

    with pytest.raises(RedisError):
        await store.blacklist_token("any-token", 60)
    with pytest.raises(RedisError):
        await store.blacklist_identity_tokens("user-1", IdentityScope.USER, 60)
