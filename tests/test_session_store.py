# =============================================================================
# USERHUB BACKEND - SESSION STORE TESTS
# =============================================================================
# File: tests/test_session_store.py
# Description: Redis adapter and session store behaviour over fakeredis
# =============================================================================

import pytest

from core.config import Settings
from core.exceptions import CacheUnavailableError
from db.adapters.redis_adapter import RedisAdapter
from session.storage import SessionStore


class TestRedisAdapter:
    """Test suite for RedisAdapter."""

    async def test_set_and_get_with_ttl(self, redis_adapter: RedisAdapter):
        assert await redis_adapter.set("greeting", "hello", ttl=60) is True

        assert await redis_adapter.get("greeting") == "hello"
        assert 0 < await redis_adapter.ttl("greeting") <= 60

    async def test_non_positive_ttl_stores_nothing(self, redis_adapter: RedisAdapter):
        assert await redis_adapter.set("gone", "x", ttl=0) is False

        assert await redis_adapter.exists("gone") is False

    async def test_ttl_reports_missing_and_persistent_keys(self, redis_adapter: RedisAdapter):
        await redis_adapter.set("forever", "x")

        assert await redis_adapter.ttl("forever") == -1
        assert await redis_adapter.ttl("missing") == -2

    async def test_delete_counts_existing_keys(self, redis_adapter: RedisAdapter):
        await redis_adapter.set("a", "1")
        await redis_adapter.set("b", "2")

        assert await redis_adapter.delete("a", "b", "c") == 2
        assert await redis_adapter.delete() == 0

    async def test_json_helpers(self, redis_adapter: RedisAdapter):
        await redis_adapter.set_json("doc", {"ids": [1, 2]}, ttl=60)
        await redis_adapter.set("raw", "not json")

        assert await redis_adapter.get_json("doc") == {"ids": [1, 2]}
        assert await redis_adapter.get_json("raw") == "not json"
        assert await redis_adapter.get_json("missing") is None

    async def test_prefix_is_applied_and_stripped(self, settings: Settings, fake_server):
        import fakeredis.aioredis

        client = fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)
        prefixed = RedisAdapter(settings.model_copy(update={"redis_key_prefix": "hub"}), client=client)

        await prefixed.set("user:1:tokens", "[]")

        assert await client.get("hub:user:1:tokens") == "[]"
        assert await prefixed.scan_keys("user:*") == ["user:1:tokens"]
        await client.aclose()

    async def test_scan_keys_is_sorted(self, redis_adapter: RedisAdapter):
        for key in ("b", "a", "c"):
            await redis_adapter.set(key, "x")

        assert await redis_adapter.scan_keys("*") == ["a", "b", "c"]

    async def test_outage_raises_cache_unavailable(self, redis_adapter: RedisAdapter, fake_server):
        fake_server.connected = False

        with pytest.raises(CacheUnavailableError):
            await redis_adapter.get("anything")
        assert await redis_adapter.check_health() is False

    async def test_unconnected_adapter_raises(self, settings: Settings):
        adapter = RedisAdapter(settings)

        with pytest.raises(CacheUnavailableError):
            await adapter.get("anything")


class TestSessionStore:
    """Test suite for SessionStore."""

    async def test_put_session_writes_both_entries(self, store: SessionStore, redis_adapter: RedisAdapter):
        await store.put_session("u1:1:aa", "u1", "acc", "ref", access_ttl=60, refresh_ttl=600)

        access = await store.get_access_entry("u1:1:aa")
        refresh = await store.get_refresh_entry("u1:1:aa")

        assert access.user_id == "u1" and access.access_token == "acc"
        assert refresh.user_id == "u1" and refresh.refresh_token == "ref"
        assert await redis_adapter.ttl("access_token:u1:1:aa") <= 60
        assert 60 < await redis_adapter.ttl("refresh_token:u1:1:aa") <= 600

    async def test_missing_entries_read_as_none(self, store: SessionStore):
        assert await store.get_access_entry("nope") is None
        assert await store.get_refresh_entry("nope") is None

    async def test_malformed_entries_read_as_none(self, store: SessionStore, redis_adapter: RedisAdapter):
        await redis_adapter.set_json("access_token:bad", {"user_id": "u1"})
        await redis_adapter.set("refresh_token:bad", "garbage")

        assert await store.get_access_entry("bad") is None
        assert await store.get_refresh_entry("bad") is None

    async def test_delete_session_is_idempotent(self, store: SessionStore):
        await store.put_session("t1", "u1", "acc", "ref", access_ttl=60, refresh_ttl=600)

        assert await store.delete_session("t1") == 2
        assert await store.delete_session("t1") == 0

    async def test_active_index_round_trip(self, store: SessionStore):
        await store.set_active_index("u1", ["t1", "t2"], ttl=600)

        assert await store.get_active_index("u1") == ["t1", "t2"]

    async def test_empty_index_clears(self, store: SessionStore, redis_adapter: RedisAdapter):
        await store.set_active_index("u1", ["t1"], ttl=600)
        await store.set_active_index("u1", [], ttl=600)

        assert await redis_adapter.exists("user:u1:tokens") is False
        assert await store.get_active_index("u1") == []

    async def test_malformed_index_reads_as_empty(self, store: SessionStore, redis_adapter: RedisAdapter):
        await redis_adapter.set_json("user:u1:tokens", {"not": "a list"})

        assert await store.get_active_index("u1") == []
