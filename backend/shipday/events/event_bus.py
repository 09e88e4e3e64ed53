"""
Async event bus — topic pub/sub
- Redis Streams when reachable, otherwise in-memory asyncio.Queue per topic
- With Redis, every worker process reads every entry of a topic, so each
  process can fan events out to its own websocket clients
- An entry carries one JSON envelope; nested payloads survive the round trip
"""

import asyncio
import json
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

# Realtime fan-out to websocket clients
REALTIME_TOPIC = "realtime.broadcast"

QUEUE_MAXSIZE = 10000
STREAM_MAXLEN = 1000
READ_BLOCK_MS = 1000

# Handler type: async callable(topic, data)
Handler = Callable[[str, dict], Coroutine[Any, Any, None]]


def encode_entry(data: dict) -> dict:
    return {
        "data": json.dumps(data, ensure_ascii=False, default=str),
        "published_at": datetime.now(timezone.utc).isoformat(),
    }


def decode_entry(fields: dict) -> dict:
    return json.loads(fields.get("data") or "{}")


class AsyncEventBus:
    """
    Usage:
        bus = AsyncEventBus(redis_url="redis://localhost:6379")
        await bus.subscribe(REALTIME_TOPIC, handler)
        await bus.start()
        await bus.publish(REALTIME_TOPIC, {"event": "shipment-assigned", "payload": {...}})
        ...
        await bus.stop()
    """

    def __init__(self, redis_url: str = "redis://localhost:6379"):
        self._redis_url = redis_url
        self._redis = None
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._queues: dict[str, asyncio.Queue] = {}
        self._tasks: list[asyncio.Task] = []
        self._running = False

    @property
    def is_redis(self) -> bool:
        return self._redis is not None

    def _queue(self, topic: str) -> asyncio.Queue:
        if topic not in self._queues:
            self._queues[topic] = asyncio.Queue(maxsize=QUEUE_MAXSIZE)
        return self._queues[topic]

    async def _connect(self):
        try:
            import redis.asyncio as aioredis
            client = aioredis.from_url(self._redis_url, decode_responses=True)
            await client.ping()
        except Exception as e:
            logger.warning(f"AsyncEventBus: Redis unavailable ({e}) — in-memory mode")
            return
        self._redis = client
        logger.info("AsyncEventBus: connected to Redis")

    async def subscribe(self, topic: str, handler: Handler):
        """Register a handler. Topics subscribed after start() get no consumer."""
        self._handlers[topic].append(handler)
        self._queue(topic)
        logger.debug(f"Subscribed: {topic} -> {handler.__qualname__}")

    async def publish(self, topic: str, data: dict):
        """Best-effort: a failed Redis write is logged and the event dropped."""
        if self._redis is None:
            self._put(topic, data)
            return
        try:
            await self._redis.xadd(topic, encode_entry(data), maxlen=STREAM_MAXLEN)
        except Exception as e:
            logger.error(f"Redis publish failed ({topic}): {e}")

    def _put(self, topic: str, data: dict):
        queue = self._queue(topic)
        if queue.full():
            # Oldest event makes room
            queue.get_nowait()
        queue.put_nowait(data)

    async def _read_queue(self, topic: str) -> list[dict]:
        try:
            return [await asyncio.wait_for(self._queue(topic).get(), timeout=READ_BLOCK_MS / 1000)]
        except asyncio.TimeoutError:
            return []

    async def _read_stream(self, topic: str, cursor: dict) -> list[dict]:
        results = await self._redis.xread({topic: cursor["last_id"]}, count=10, block=READ_BLOCK_MS)
        batch = []
        for _, entries in results or []:
            for entry_id, fields in entries:
                cursor["last_id"] = entry_id
                batch.append(decode_entry(fields))
        return batch

    async def _consume(self, topic: str):
        # "$": entries published after this consumer started
        cursor = {"last_id": "$"}
        while self._running:
            try:
                if self._redis is not None:
                    batch = await self._read_stream(topic, cursor)
                else:
                    batch = await self._read_queue(topic)
                for data in batch:
                    await self._dispatch(topic, data)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Consumer error ({topic}): {e}")
                await asyncio.sleep(1.0 if self._redis is not None else 0.1)

    async def _dispatch(self, topic: str, data: dict):
        for handler in self._handlers.get(topic, []):
            try:
                await handler(topic, data)
            except Exception as e:
                logger.error(f"Handler error ({topic}, {handler.__qualname__}): {e}")

    async def start(self):
        """Connect, then start one consumer task per subscribed topic."""
        await self._connect()
        self._running = True
        self._tasks = [
            asyncio.create_task(self._consume(topic), name=f"consumer-{topic}")
            for topic in self._handlers
        ]
        logger.info(
            f"AsyncEventBus started: {len(self._tasks)} consumers "
            f"({'Redis' if self.is_redis else 'in-memory'})"
        )

    async def stop(self):
        self._running = False
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
        logger.info("AsyncEventBus stopped")
