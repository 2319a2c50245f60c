"""
Cache stores for repository reads: in-memory, Redis and a no-op store.
"""

from .base import CacheStore, NullCache
from .memory import MemoryCache
from .redis_cache import RedisCache

__all__ = ["CacheStore", "NullCache", "MemoryCache", "RedisCache"]
