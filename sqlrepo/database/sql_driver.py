from typing import AsyncGenerator
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from .base import BaseDatabaseDriver

class SQLDriver(BaseDatabaseDriver):
    def __init__(self, url: str, echo: bool = False, **engine_options):
        self.url = url
        self.engine = create_async_engine(url, echo=echo, future=True, **engine_options)
        self.session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def connect(self):
        """Verify the engine can reach the database."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

    async def disconnect(self):
        """Dispose the engine's connection pool."""
        await self.engine.dispose()

    async def create_all(self):
        """Create tables for every registered SQLModel table model."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            yield session
