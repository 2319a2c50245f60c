"""Delete operations for Repository."""

from typing import Any


class DeletesEntity:
    """Delete operations; mixed into Repository."""

    async def delete(self, record: Any = None) -> bool:
        """Delete a record (instance, primary key, or None for the current query's first row)."""
        target = await self._locate(record)

        await self.session.delete(target)
        await self.session.commit()

        self.logger.info(f"{type(target).__name__} #{self._identifier(target)} deleted")
        await self.invalidate_cache(target)
        return True
