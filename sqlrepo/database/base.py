from abc import ABC, abstractmethod

class BaseDatabaseDriver(ABC):
    """Connection lifecycle shared by the SQL and Redis drivers."""

    @abstractmethod
    async def connect(self):
        pass

    @abstractmethod
    async def disconnect(self):
        pass

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
