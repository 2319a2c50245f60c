from typing import Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "sqlrepo"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True

    # --- Database (SQLModel) ---
    DB_DRIVER: str = "mysql+aiomysql"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "app_db"
    DB_ECHO: bool = False

    @property
    def DATABASE_URL(self) -> str:
        # Build async connection URL
        safe_password = quote_plus(self.DB_PASSWORD)
        return f"{self.DB_DRIVER}://{self.DB_USER}:{safe_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # --- Redis ---
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # --- Repository cache ---
    CACHE_DRIVER: str = "memory"  # memory, redis, null
    CACHE_ENABLED: bool = True
    CACHE_TTL: int = 3600  # Seconds
    CACHE_PREFIX: Optional[str] = None  # Prepended by the store, not part of cache_key()

    # --- Pagination ---
    DEFAULT_PER_PAGE: int = 15

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()
