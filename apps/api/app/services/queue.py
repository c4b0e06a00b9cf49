"""Queue and progress utilities backed by Redis."""

import asyncio
import json
from collections.abc import AsyncGenerator
from typing import Any, Literal, TypedDict

import redis.asyncio as redis

from app.settings import settings

_redis: redis.Redis | None = None

QUEUE_NAME = "lesson_builder:jobs"
PROGRESS_PREFIX = "lesson_builder:progress"

TaskKind = Literal["job"]


class TaskPayload(TypedDict):
    """Serialized task payload for the worker queue."""

    kind: TaskKind
    job_id: str


async def get_redis() -> redis.Redis:
    """Get the Redis client instance."""
    global _redis
    if _redis is None:
        _redis = redis.from_url(settings.redis_url)
    return _redis


async def close_redis() -> None:
    """Close the shared Redis client, if one was opened."""
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


async def enqueue_job(job_id: str) -> None:
    """Add a job to the processing queue."""
    client = await get_redis()
    payload: TaskPayload = {"kind": "job", "job_id": job_id}
    await client.rpush(QUEUE_NAME, json.dumps(payload))


async def subscribe_progress(
    job_id: str,
    poll_interval: float = 0.25,
) -> AsyncGenerator[dict[str, Any], None]:
    """Subscribe to progress events for a job."""
    client = await get_redis()
    pubsub = client.pubsub()
    channel = f"{PROGRESS_PREFIX}:{job_id}"
    await pubsub.subscribe(channel)

    try:
        while True:
            message = await pubsub.get_message(
                ignore_subscribe_messages=True,
                timeout=1.0,
            )
            if message and message.get("type") == "message":
                data = message.get("data")
                if isinstance(data, bytes):
                    data = data.decode("utf-8")
                if isinstance(data, str):
                    try:
                        event = json.loads(data)
                    except json.JSONDecodeError:
                        continue
                    yield event
                    if event.get("status") in ("completed", "failed"):
                        return
            await asyncio.sleep(poll_interval)
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.aclose()
