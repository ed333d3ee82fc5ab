# storage.py
import logging
from typing import Optional, Protocol

import redis.asyncio as aioredis

from uxaudit import config

log = logging.getLogger("uxaudit")


class Storage(Protocol):
    """A single named persistence slot holding one serialized blob."""

    async def read(self) -> Optional[str]: ...

    async def write(self, blob: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[str] = None):
        self.blob = initial
        self.writes = 0

    async def read(self) -> Optional[str]:
        return self.blob

    async def write(self, blob: str) -> None:
        self.blob = blob
        self.writes += 1


class RedisStorage:
    def __init__(self, client: aioredis.Redis, key: str = config.HISTORY_KEY):
        self.client = client
        self.key = key

    async def read(self) -> Optional[str]:
        return await self.client.get(self.key)

    async def write(self, blob: str) -> None:
        # no TTL: the slot lives until it is overwritten
        await self.client.set(self.key, blob)


redis: aioredis.Redis | None = None


async def init_storage(backend: str = config.STORAGE_BACKEND) -> Storage:
    global redis
    if backend == "memory":
        log.info("Using in-memory history storage")
        return MemoryStorage()

    redis = aioredis.Redis.from_url(config.REDIS_URL, decode_responses=True)
    try:
        await redis.ping()
        log.info("Connected to Redis at %s", config.REDIS_URL)
    except Exception as e:
        log.error("Failed to connect to Redis: %s; history will not survive restarts", e)
        await close_storage()
        return MemoryStorage()
    return RedisStorage(redis, config.HISTORY_KEY)


async def close_storage():
    global redis
    if redis:
        await redis.aclose()
        redis = None
