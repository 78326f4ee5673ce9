import asyncio
from contextlib import aclosing
import json
from typing import Iterable
from fastapi import WebSocket
import redis.asyncio as redis
from redis.exceptions import RedisError
import logfire

from restopos.config.config import settings

RESOURCES_CHANNEL = "interview_resources"
RECENT_LIMIT = 50
RETRY_DELAY = 1.0
MAX_RETRY_DELAY = 30.0


def merge_by_id(resources: Iterable[dict], incoming: dict) -> list[dict]:
    """
    Upsert ``incoming`` into a newest-first list keyed by ``id``.

    A row already present is replaced where it stands, a new row goes to the
    front, so replaying the same insert never duplicates it.
    """
    resources = list(resources)
    for index, resource in enumerate(resources):
        if str(resource["id"]) == str(incoming["id"]):
            resources[index] = incoming
            return resources
    return [incoming, *resources]


class ResourceFeedManager:
    def __init__(self):
        self.redis = redis.Redis.from_url(settings.REDIS_URL)
        self.active_connections: list[WebSocket] = []
        self.recent: list[dict] = []
        self.retry_delay = RETRY_DELAY

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logfire.info(
            "resource feed client connected ({count} open)",
            count=len(self.active_connections),
        )

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def publish(self, resource: dict):
        """Publish a new resource to every process listening on the channel."""
        await self.redis.publish(RESOURCES_CHANNEL, json.dumps(resource, default=str))

    async def listen_for_messages(self):
        """Listen for resources on Redis Pub/Sub and forward them to clients.

        Runs until cancelled, resubscribing with a growing delay whenever the
        redis connection drops.
        """
        delay = self.retry_delay
        while True:
            try:
                async with aclosing(self._subscribe()) as resources:
                    async for resource in resources:
                        delay = self.retry_delay
                        await self.distribute_message(resource)
                logfire.warn("resource feed subscription ended, resubscribing")
            except (RedisError, OSError) as e:
                logfire.error(
                    "resource feed lost redis: {error}, retrying in {delay}s",
                    error=str(e),
                    delay=delay,
                )
            await asyncio.sleep(delay)
            delay = min(delay * 2, MAX_RETRY_DELAY)

    async def _subscribe(self):
        pubsub = self.redis.pubsub()
        try:
            await pubsub.subscribe(RESOURCES_CHANNEL)
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                data = message["data"]
                if isinstance(data, bytes):
                    data = data.decode("utf-8")
                yield json.loads(data)
        finally:
            await pubsub.aclose()

    async def distribute_message(self, resource: dict):
        """Send a resource to all connected websockets."""
        self.recent = merge_by_id(self.recent, resource)[:RECENT_LIMIT]
        payload = {"event": "INSERT", "table": RESOURCES_CHANNEL, "new": resource}

        for websocket in list(self.active_connections):
            try:
                await websocket.send_json(payload)
            except Exception as e:
                logfire.warn("dropping resource feed client: {error}", error=str(e))
                self.disconnect(websocket)


manager = ResourceFeedManager()
