"""
Realtime fan-out tests
- AsyncEventBus in-memory mode
- RealtimeChannel → ConnectionManager
- /ws/realtime keepalive
"""

import asyncio

import pytest

from shipday.api.websocket import ConnectionManager
from shipday.events.event_bus import AsyncEventBus, REALTIME_TOPIC, decode_entry, encode_entry
from shipday.services.realtime import RealtimeChannel

# Nothing listens here, so the bus stays in in-memory mode
UNREACHABLE_REDIS = "redis://127.0.0.1:1"


class RecordingManager(ConnectionManager):
    def __init__(self):
        super().__init__()
        self.events = []

    async def broadcast_event(self, event_type: str, data: dict):
        self.events.append((event_type, data))


class FakeSocket:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_text(self, text: str):
        if self.fail:
            raise RuntimeError("closed")
        self.sent.append(text)


async def _wait_for(predicate, timeout: float = 2.0):
    deadline = asyncio.get_event_loop().time() + timeout
    while not predicate():
        if asyncio.get_event_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


# ==================== Event bus ====================

def test_stream_entry_keeps_nested_payload():
    data = {"event": "shipment-assigned", "payload": {"notification": {"id": 3, "isRead": False}}}

    fields = encode_entry(data)

    assert set(fields) == {"data", "published_at"}
    assert decode_entry(fields) == data


@pytest.mark.asyncio
async def test_in_memory_publish_reaches_subscriber():
    bus = AsyncEventBus(UNREACHABLE_REDIS)
    received = []

    async def handler(topic, data):
        received.append((topic, data))

    await bus.subscribe("test.topic", handler)
    await bus.start()
    try:
        assert bus.is_redis is False
        await bus.publish("test.topic", {"n": 1})
        await _wait_for(lambda: received)
    finally:
        await bus.stop()

    assert received == [("test.topic", {"n": 1})]


@pytest.mark.asyncio
async def test_failing_handler_does_not_block_others():
    bus = AsyncEventBus(UNREACHABLE_REDIS)
    received = []

    async def broken(topic, data):
        raise RuntimeError("boom")

    async def handler(topic, data):
        received.append(data)

    await bus.subscribe("test.topic", broken)
    await bus.subscribe("test.topic", handler)
    await bus.start()
    try:
        await bus.publish("test.topic", {"n": 1})
        await bus.publish("test.topic", {"n": 2})
        await _wait_for(lambda: len(received) == 2)
    finally:
        await bus.stop()

    assert received == [{"n": 1}, {"n": 2}]


# ==================== Realtime channel ====================

@pytest.mark.asyncio
async def test_channel_forwards_to_connection_manager():
    bus = AsyncEventBus(UNREACHABLE_REDIS)
    manager = RecordingManager()
    channel = RealtimeChannel(bus, manager)
    await channel.attach()
    await bus.start()
    try:
        await channel.emit("shipment-assigned", {"driverId": "DRV001", "shipmentId": "SHP001"})
        await _wait_for(lambda: manager.events)
    finally:
        await bus.stop()

    assert manager.events == [("shipment-assigned", {"driverId": "DRV001", "shipmentId": "SHP001"})]
    assert REALTIME_TOPIC in bus._handlers


@pytest.mark.asyncio
async def test_broadcast_drops_dead_sockets():
    manager = ConnectionManager()
    alive, dead = FakeSocket(), FakeSocket(fail=True)
    manager.active_connections.extend([alive, dead])

    await manager.broadcast_event("shipment-assigned", {"shipmentId": "SHP001"})

    assert manager.active_connections == [alive]
    assert '"type": "shipment-assigned"' in alive.sent[0]
    assert '"shipmentId": "SHP001"' in alive.sent[0]


# ==================== WebSocket ====================

def test_websocket_ping_pong(client):
    with client.websocket_connect("/ws/realtime") as ws:
        ws.send_text("ping")
        assert ws.receive_json() == {"type": "pong"}
