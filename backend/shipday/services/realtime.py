"""
Realtime channel — fire-and-forget broadcast to connected clients.
emit() publishes on the event bus; the bus subscriber forwards to this
process's websocket connections, so with Redis every worker fans out.
"""

import logging

from shipday.api.websocket import ConnectionManager
from shipday.events.event_bus import AsyncEventBus, REALTIME_TOPIC

logger = logging.getLogger(__name__)


class RealtimeChannel:
    def __init__(self, bus: AsyncEventBus, manager: ConnectionManager):
        self.bus = bus
        self.manager = manager

    async def attach(self):
        """Subscribe the websocket forwarder. Call before bus.start()."""
        await self.bus.subscribe(REALTIME_TOPIC, self._forward)

    async def emit(self, event: str, payload: dict):
        await self.bus.publish(REALTIME_TOPIC, {"event": event, "payload": payload})
        logger.debug(f"Realtime event queued: {event}")

    async def _forward(self, topic: str, data: dict):
        await self.manager.broadcast_event(data.get("event", "message"), data.get("payload") or {})
