"""Settings, database manager and logging tests."""
from types import SimpleNamespace

import pytest
from loguru import logger

from sqlrepo.cache import MemoryCache, NullCache
from sqlrepo.config import Settings
from sqlrepo.database.manager import DatabaseManager
from sqlrepo.logging.logger import LogConfig, get_logger


@pytest.fixture(autouse=True)
def reset_manager():
    DatabaseManager.reset_instance()
    yield
    DatabaseManager.reset_instance()


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.CACHE_TTL == 3600
        assert settings.DEFAULT_PER_PAGE == 15

    def test_urls(self):
        settings = Settings(DB_USER="app", DB_PASSWORD="p@ss", DB_HOST="db", DB_PORT=3307, DB_NAME="repo",
                            REDIS_HOST="cache", REDIS_PORT=6380, REDIS_DB=2)
        assert settings.DATABASE_URL == "mysql+aiomysql://app:p%40ss@db:3307/repo"
        assert settings.REDIS_URL == "redis://cache:6380/2"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL", "90")
        monkeypatch.setenv("cache_driver", "null")
        settings = Settings()
        assert settings.CACHE_TTL == 90
        assert settings.CACHE_DRIVER == "null"


class TestDatabaseManager:

    def test_singleton(self):
        settings = Settings()
        assert DatabaseManager.get_instance(settings) is DatabaseManager.get_instance()

    def test_memory_cache(self):
        manager = DatabaseManager(Settings(CACHE_DRIVER="memory"))
        cache = manager.get_cache()
        assert isinstance(cache, MemoryCache)
        assert manager.get_cache() is cache

    def test_null_cache(self):
        assert isinstance(DatabaseManager(Settings(CACHE_DRIVER="null")).get_cache(), NullCache)
        assert isinstance(DatabaseManager(Settings(CACHE_ENABLED=False)).get_cache(), NullCache)

    def test_redis_cache_requires_connection(self):
        manager = DatabaseManager(Settings(CACHE_DRIVER="redis"))
        with pytest.raises(RuntimeError):
            manager.get_cache()

    def test_unknown_driver(self):
        with pytest.raises(ValueError):
            DatabaseManager(Settings(CACHE_DRIVER="memcached")).get_cache()


class TestLogging:

    def test_setup_logging_creates_log_dir(self, tmp_path):
        log_dir = tmp_path / "logs"
        LogConfig.setup_logging(level="DEBUG", log_dir=str(log_dir))
        try:
            get_logger("test").info("logging configured")
            assert log_dir.is_dir()
        finally:
            logger.remove()

    def test_get_logger_binds_trace_id(self):
        messages = []
        handler_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
        try:
            get_logger("repo").debug("hello")
        finally:
            logger.remove(handler_id)
        assert messages[0]["extra"]["trace_id"] == "system"
        assert messages[0]["extra"]["name"] == "repo"

    def test_get_logger_uses_request_trace_id(self):
        request = SimpleNamespace(state=SimpleNamespace(trace_id="abc"))
        messages = []
        handler_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
        try:
            get_logger("repo", request).debug("hello")
        finally:
            logger.remove(handler_id)
        assert messages[0]["extra"]["trace_id"] == "abc"
