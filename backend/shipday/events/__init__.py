"""
Event system package
- Async pub/sub event bus (Redis Streams, in-memory fallback)
"""

from shipday.events.event_bus import AsyncEventBus, REALTIME_TOPIC

__all__ = ["AsyncEventBus", "REALTIME_TOPIC"]
