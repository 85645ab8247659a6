# app/infrastructure/cache/redis_client.py

from typing import Mapping

import redis.asyncio as redis


class RedisClient:
    def __init__(self, redis_url: str):
        self.client = redis.from_url(
            redis_url,
            decode_responses=True,
        )

    async def get(self, key: str) -> str | None:
        """Get value for key. Returns None if key does not exist."""
        return await self.client.get(key)

    async def mget(self, keys: list[str]) -> list[str | None]:
        """Get values for keys in one round trip; missing keys come back as None."""
        if not keys:
            return []
        return await self.client.mget(keys)

    async def incr(self, key: str) -> int:
        """Increment key, return new value."""
        return await self.client.incr(key)

    async def zrange_all(self, key: str) -> list[str]:
        """All members of a sorted set, ascending by score."""
        return await self.client.zrange(key, 0, -1)

    async def set_with_indexes(
        self,
        key: str,
        value: str,
        indexes: Mapping[str, float],
        member: str,
    ) -> None:
        """Set key and add member to each sorted-set index in one MULTI/EXEC transaction."""
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(key, value)
            for index_key, score in indexes.items():
                pipe.zadd(index_key, {member: score})
            await pipe.execute()

    async def ping(self) -> bool:
        return await self.client.ping()

    async def close(self) -> None:
        await self.client.aclose()
