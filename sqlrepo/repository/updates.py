"""Update operations for Repository."""

from typing import Any, Dict

from sqlmodel import SQLModel


class UpdatesEntity:
    """Update operations; mixed into Repository."""

    async def update(self, record: Any, properties: Dict[str, Any]) -> SQLModel:
        """
        Apply properties to a record and persist it.

        record is a model instance, a primary key, or None for the first row of
        the current query. Unknown fields are skipped. Raises RecordNotFound
        when nothing matches; the cache is invalidated only after the commit.
        """
        target = await self._locate(record)
        primary_key = self._primary_key(type(target))

        for key, value in properties.items():
            if key == primary_key or not hasattr(type(target), key):
                self.logger.warning(f"{type(target).__name__}.{key} is not updatable, skipped")
                continue
            setattr(target, key, value)

        self.session.add(target)
        await self.session.commit()
        await self.session.refresh(target)

        self.logger.info(f"{type(target).__name__} #{self._identifier(target)} updated")
        await self.invalidate_cache(target)
        return target
