from typing import Any, Optional
from aiocache import SimpleMemoryCache
from aiocache.serializers import PickleSerializer
from .base import CacheStore


class MemoryCache(CacheStore):
    """In-process store over aiocache; expired entries are dropped by their TTL timer."""

    def __init__(self, namespace: Optional[str] = None):
        # Pickled on write, so callers never share the stored object
        self.client = SimpleMemoryCache(serializer=PickleSerializer(), namespace=namespace or "")

    async def get(self, key: str) -> Optional[Any]:
        return await self.client.get(key)

    async def put(self, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            await self.forget(key)
            return
        await self.client.set(key, value, ttl=ttl)

    async def forget(self, key: str) -> bool:
        return bool(await self.client.delete(key))

    async def flush(self) -> None:
        await self.client.clear()

    async def exists(self, key: str) -> bool:
        return bool(await self.client.exists(key))
