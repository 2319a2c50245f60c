from sqlrepo.cache import CacheStore, MemoryCache, NullCache, RedisCache
from .sql_driver import SQLDriver
from .redis_driver import RedisDriver

class DatabaseManager:
    _instance = None

    def __init__(self, settings):
        self.settings = settings
        self.sql = SQLDriver(settings.DATABASE_URL, echo=settings.DB_ECHO)
        self.redis = RedisDriver(settings.REDIS_URL)
        self._cache = None

    @classmethod
    def get_instance(cls, settings=None):
        if cls._instance is None:
            if settings is None:
                from sqlrepo.config import settings as app_settings
                settings = app_settings
            cls._instance = cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls):
        cls._instance = None

    def get_cache(self) -> CacheStore:
        """Build (once) the cache store selected by CACHE_DRIVER."""
        if self._cache is not None:
            return self._cache

        driver = self.settings.CACHE_DRIVER.lower()
        if not self.settings.CACHE_ENABLED or driver == "null":
            self._cache = NullCache()
        elif driver == "memory":
            self._cache = MemoryCache(namespace=self.settings.CACHE_PREFIX)
        elif driver == "redis":
            self._cache = RedisCache(self.redis.get_client(), prefix=self.settings.CACHE_PREFIX)
        else:
            raise ValueError(f"Unsupported CACHE_DRIVER: {self.settings.CACHE_DRIVER}")
        return self._cache

    async def connect(self):
        await self.sql.connect()
        if self.settings.CACHE_ENABLED and self.settings.CACHE_DRIVER.lower() == "redis":
            await self.redis.connect()

    async def disconnect(self):
        await self.redis.disconnect()
        await self.sql.disconnect()
        self._cache = None
