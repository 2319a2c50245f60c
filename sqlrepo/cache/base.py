"""
Cache store abstraction used by repositories.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional


class CacheStore(ABC):
    """Key/value store with per-entry TTL; missing keys read as None."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the value for key, or None when absent or expired."""
        pass

    @abstractmethod
    async def put(self, key: str, value: Any, ttl: int) -> None:
        """Store value for ttl seconds."""
        pass

    @abstractmethod
    async def forget(self, key: str) -> bool:
        """Remove key; returns False when nothing was stored."""
        pass

    @abstractmethod
    async def flush(self) -> None:
        """Remove every entry owned by this store."""
        pass

    async def remember(self, key: str, ttl: int, callback: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for key, computing and storing it on a miss."""
        value = await self.get(key)
        if value is not None:
            return value

        value = await callback()
        await self.put(key, value, ttl)
        return value


class NullCache(CacheStore):
    """Store that never holds anything."""

    async def get(self, key: str) -> Optional[Any]:
        return None

    async def put(self, key: str, value: Any, ttl: int) -> None:
        return None

    async def forget(self, key: str) -> bool:
        return False

    async def flush(self) -> None:
        return None
