import json
from typing import Any, Optional
from .base import CacheStore


class RedisCache(CacheStore):
    """Redis-backed store; values are JSON encoded and written with SETEX."""

    def __init__(self, client, prefix: Optional[str] = None):
        self.client = client
        self.prefix = prefix or ""

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[Any]:
        raw = await self.client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            await self.forget(key)
            return
        await self.client.setex(self._key(key), ttl, json.dumps(value))

    async def forget(self, key: str) -> bool:
        # DEL on a missing key returns 0, not an error
        return bool(await self.client.delete(self._key(key)))

    async def flush(self) -> None:
        if not self.prefix:
            # Unprefixed keys cannot be told apart from other users of the database
            raise ValueError("RedisCache.flush() requires a key prefix")

        keys = [key async for key in self.client.scan_iter(match=f"{self.prefix}*")]
        if keys:
            await self.client.delete(*keys)
