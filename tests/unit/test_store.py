"""Unit tests for credential store backends."""

from __future__ import annotations

import pytest
from redis.exceptions import RedisError

from clinic_sdk.store import CredentialStoreError, InMemoryCredentialStore, RedisCredentialStore


class _FakeRedis:
    """Minimal async Redis stub used for credential store tests."""

    def __init__(self) -> None:
        self.values: dict[str, bytes] = {}
        self.fail = False

    async def get(self, key: str) -> bytes | None:
        """Return stored value for key."""
        if self.fail:
            raise RedisError("redis unavailable")
        return self.values.get(key)

    async def set(self, key: str, value: str) -> bool:
        """Store value."""
        if self.fail:
            raise RedisError("redis unavailable")
        self.values[key] = value.encode("utf-8")
        return True

    async def delete(self, *keys: str) -> int:
        """Delete keys."""
        if self.fail:
            raise RedisError("redis unavailable")
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.mark.asyncio
async def test_in_memory_store_round_trip_and_clear() -> None:
    """set_tokens is readable back and clear forgets both credentials."""
    store = InMemoryCredentialStore()
    await store.set_tokens("a", "r")

    assert await store.get_access() == "a"
    assert await store.get_refresh() == "r"

    await store.clear()
    assert await store.get_access() is None
    assert await store.get_refresh() is None


@pytest.mark.asyncio
async def test_in_memory_store_keeps_refresh_when_not_supplied() -> None:
    """Omitting the refresh token leaves the stored one untouched."""
    store = InMemoryCredentialStore("a", "r")
    await store.set_tokens("a2")

    assert await store.get_access() == "a2"
    assert await store.get_refresh() == "r"


@pytest.mark.asyncio
async def test_store_notifies_listeners_on_every_mutation() -> None:
    """Listeners fire for set and clear until unsubscribed."""
    store = InMemoryCredentialStore()
    events: list[str] = []
    unsubscribe = store.subscribe(lambda: events.append("changed"))

    await store.set_tokens("a", "r")
    await store.clear()
    unsubscribe()
    await store.set_tokens("b")

    assert events == ["changed", "changed"]


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others() -> None:
    """A raising listener is logged and the remaining listeners still run."""
    store = InMemoryCredentialStore()
    events: list[str] = []

    def broken() -> None:
        raise RuntimeError("listener bug")

    store.subscribe(broken)
    store.subscribe(lambda: events.append("ok"))
    await store.set_tokens("a")

    assert events == ["ok"]
    assert await store.get_access() == "a"


@pytest.mark.asyncio
async def test_redis_store_round_trip_uses_prefixed_keys() -> None:
    """Redis store decodes values and namespaces its keys."""
    redis_client = _FakeRedis()
    store = RedisCredentialStore(redis_client, key_prefix="tenant-1")  # type: ignore[arg-type]
    events: list[str] = []
    store.subscribe(lambda: events.append("changed"))

    await store.set_tokens("a", "r")
    assert set(redis_client.values) == {"tenant-1:access_token", "tenant-1:refresh_token"}
    assert await store.get_access() == "a"
    assert await store.get_refresh() == "r"

    await store.set_tokens("a2")
    assert await store.get_refresh() == "r"

    await store.clear()
    assert await store.get_access() is None
    assert await store.get_refresh() is None
    assert events == ["changed", "changed", "changed"]


@pytest.mark.asyncio
async def test_redis_store_wraps_backend_errors() -> None:
    """Redis failures surface as CredentialStoreError."""
    redis_client = _FakeRedis()
    redis_client.fail = True
    store = RedisCredentialStore(redis_client)  # type: ignore[arg-type]

    with pytest.raises(CredentialStoreError):
        await store.get_access()
    with pytest.raises(CredentialStoreError):
        await store.set_tokens("a", "r")
    with pytest.raises(CredentialStoreError):
        await store.clear()
