"""
Tests for the Redis block cache in front of a ledger reader.
"""
import pytest

from blockscan.infrastructure.cache.redis_service import RedisService
from blockscan.infrastructure.gateways.cached_reader import DEFAULT_BLOCK_TTL, CachedLedgerReader
from blockscan.infrastructure.gateways.local_mock import InMemoryLedger


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.store.pop(key, None)


class CountingLedger(InMemoryLedger):
    def __init__(self):
        super().__init__()
        self.fetches = 0

    async def fetch_block(self, block_hash):
        self.fetches += 1
        return await super().fetch_block(block_hash)


@pytest.fixture
def inner():
    ledger = CountingLedger()
    ledger.add_block(5, [("aa", [("0.5", ["addrA"])])])
    return ledger


@pytest.mark.asyncio
async def test_second_fetch_is_served_from_cache(inner):
    redis_client = FakeRedis()
    reader = CachedLedgerReader(inner, RedisService(client=redis_client), ttl_seconds=600)

    block_hash = await reader.resolve_block_hash(5)
    first = await reader.fetch_block(block_hash)
    second = await reader.fetch_block(block_hash)

    assert inner.fetches == 1
    assert second == first
    assert redis_client.ttls[CachedLedgerReader.cache_key(block_hash)] == 600


@pytest.mark.asyncio
async def test_heights_are_never_cached(inner):
    reader = CachedLedgerReader(inner, RedisService(client=FakeRedis()))

    await reader.resolve_block_hash(5)
    await reader.resolve_block_hash(5)

    assert inner.requested == [5, 5]


@pytest.mark.asyncio
async def test_corrupt_entry_is_refetched(inner):
    redis_client = FakeRedis()
    reader = CachedLedgerReader(inner, RedisService(client=redis_client))
    block_hash = await reader.resolve_block_hash(5)
    redis_client.store[CachedLedgerReader.cache_key(block_hash)] = '{"unexpected": true}'

    block = await reader.fetch_block(block_hash)

    assert block.hash == block_hash
    assert inner.fetches == 1


def test_cache_disabled_without_redis_url(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)
    cache = RedisService()

    assert not cache.enabled
    assert cache.get("anything") is None
    cache.set("anything", {"a": 1})


def test_malformed_redis_url_disables_cache(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "localhost:6379")
    cache = RedisService()

    assert not cache.enabled
    assert cache.get("anything") is None


@pytest.mark.parametrize("raw,expected", [
    (None, DEFAULT_BLOCK_TTL),
    ("3600", 3600),
    ("one day", DEFAULT_BLOCK_TTL),
    ("-5", DEFAULT_BLOCK_TTL),
])
def test_block_ttl_from_env(monkeypatch, inner, raw, expected):
    if raw is None:
        monkeypatch.delenv("BLOCK_CACHE_TTL", raising=False)
    else:
        monkeypatch.setenv("BLOCK_CACHE_TTL", raw)

    reader = CachedLedgerReader(inner, RedisService(client=FakeRedis()))
    assert reader.ttl_seconds == expected
