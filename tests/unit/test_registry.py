from __future__ import annotations

import pytest

from pulse_chat.infrastructure.ws.registry import REPLACED_CLOSE_CODE
from tests.conftest import FakeHandle


@pytest.mark.asyncio
async def test_register_and_lookup(registry):
    handle = FakeHandle("a")

    await registry.register("alice", handle)

    assert registry.lookup("alice") is handle
    assert registry.lookup("bob") is None
    assert "alice" in registry
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_newer_connection_replaces_and_closes_older(registry):
    old, new = FakeHandle("old"), FakeHandle("new")
    await registry.register("alice", old)

    await registry.register("alice", new)

    assert registry.lookup("alice") is new
    assert old.closed_with is not None
    assert old.closed_with[0] == REPLACED_CLOSE_CODE
    assert new.closed_with is None
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_registering_same_handle_twice_keeps_it_open(registry):
    handle = FakeHandle("a")
    await registry.register("alice", handle)

    await registry.register("alice", handle)

    assert handle.closed_with is None


@pytest.mark.asyncio
async def test_stale_unregister_keeps_newer_connection(registry):
    old, new = FakeHandle("old"), FakeHandle("new")
    await registry.register("alice", old)
    await registry.register("alice", new)

    removed = registry.unregister("alice", old)

    assert removed is False
    assert registry.lookup("alice") is new


@pytest.mark.asyncio
async def test_unregister_current_handle(registry):
    handle = FakeHandle("a")
    await registry.register("alice", handle)

    assert registry.unregister("alice", handle) is True
    assert registry.lookup("alice") is None
    assert registry.unregister("alice", handle) is False


@pytest.mark.asyncio
async def test_online_user_ids(registry):
    await registry.register("alice", FakeHandle("a"))
    await registry.register("bob", FakeHandle("b"))

    assert sorted(registry.online_user_ids()) == ["alice", "bob"]


@pytest.mark.asyncio
async def test_failed_close_of_replaced_handle_is_tolerated(registry):
    class Broken(FakeHandle):
        async def close(self, code: int = 1000, reason: str = "") -> None:
            raise ConnectionResetError

    new = FakeHandle("new")
    await registry.register("alice", Broken("old"))

    await registry.register("alice", new)

    assert registry.lookup("alice") is new
