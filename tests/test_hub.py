"""
Tests for the ConnectionHub WebSocket transport.
"""

from __future__ import annotations

import pytest

from aistream.websockets.hub import ConnectionHub


class FakeWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("Cannot call send once a close message has been sent.")
        self.sent.append(payload)


@pytest.fixture
def hub():
    return ConnectionHub()


@pytest.fixture
def sockets(hub):
    created = {}
    for connection_id in ("c1", "c2", "c3"):
        created[connection_id] = FakeWebSocket()
        hub.register(connection_id, created[connection_id])
    return created


@pytest.mark.asyncio
async def test_send_to_group_reaches_every_member(hub, sockets):
    await hub.add_to_group("c1", "room1")
    await hub.add_to_group("c2", "room1")
    await hub.add_to_group("c3", "room2")

    failed = await hub.send_to_group("room1", "newMessageWithId", "AI Assistant", "id-1", "4 is")

    expected = {"type": "event", "target": "newMessageWithId", "arguments": ["AI Assistant", "id-1", "4 is"]}
    assert failed == []
    assert sockets["c1"].sent == [expected]
    assert sockets["c2"].sent == [expected]
    assert sockets["c3"].sent == []


@pytest.mark.asyncio
async def test_send_to_others_skips_sender(hub, sockets):
    await hub.add_to_group("c1", "room1")
    await hub.add_to_group("c2", "room1")

    await hub.send_to_others_in_group("room1", "c1", "NewMessage", "Alice", "hello")

    assert sockets["c1"].sent == []
    assert sockets["c2"].sent == [{"type": "event", "target": "NewMessage", "arguments": ["Alice", "hello"]}]


@pytest.mark.asyncio
async def test_add_to_group_moves_connection(hub, sockets):
    assert await hub.add_to_group("c1", "room1") is True
    await hub.add_to_group("c1", "room2")

    assert hub.members("room1") == []
    assert hub.members("room2") == ["c1"]


@pytest.mark.asyncio
async def test_failed_send_is_reported_not_raised(hub, sockets):
    broken = FakeWebSocket(fail=True)
    hub.register("broken", broken)
    await hub.add_to_group("c1", "room1")
    await hub.add_to_group("broken", "room1")

    failed = await hub.send_to_group("room1", "NewMessage", "Alice", "hi")

    assert failed == ["broken"]
    assert len(sockets["c1"].sent) == 1


@pytest.mark.asyncio
async def test_unregister_removes_from_group(hub, sockets):
    await hub.add_to_group("c1", "room1")
    await hub.add_to_group("c2", "room1")

    hub.unregister("c1")

    assert hub.members("room1") == ["c2"]
    assert hub.get_active_connections() == 2
    assert await hub.send_json("c1", {"type": "pong"}) is False


@pytest.mark.asyncio
async def test_unknown_connection_is_ignored(hub):
    assert await hub.add_to_group("ghost", "room1") is False
    hub.unregister("ghost")

    assert hub.members("room1") == []
    assert await hub.send_to_group("room1", "NewMessage", "a", "b") == []
