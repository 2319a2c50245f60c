"""Create operations for Repository."""

from typing import Any, Dict, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm.interfaces import ONETOMANY
from sqlmodel import SQLModel

from sqlrepo.exceptions.errors import InvalidRelation, RecordNotFound


class CreatesEntity:
    """Create operations; mixed into Repository."""

    async def create(self, properties: Dict[str, Any]) -> SQLModel:
        """Persist a new record; through a relation the foreign key points at the first parent row."""
        model = self._target_model()
        record = model(**properties)

        if self.relation_name:
            await self._attach_to_parent(record)

        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)

        self.logger.info(f"{model.__name__} #{self._identifier(record)} created")
        await self.invalidate_cache(record)
        return record

    async def first_or_create(
        self, attributes: Dict[str, Any], values: Optional[Dict[str, Any]] = None
    ) -> SQLModel:
        """First record matching attributes, else create one from attributes + values."""
        record = await self.find_one(**attributes)
        if record is not None:
            return record
        return await self.create({**attributes, **(values or {})})

    async def _attach_to_parent(self, record: SQLModel) -> None:
        parent_model = self._require_entity()
        prop = sa_inspect(parent_model).relationships[self.relation_name]
        if prop.secondary is not None or prop.direction is not ONETOMANY:
            raise InvalidRelation(
                parent_model.__name__,
                self.relation_name,
                "create needs a one-to-many or one-to-one relationship",
            )

        result = await self.session.exec(self._parent_query.limit(1))
        parent = result.first()
        if parent is None:
            raise RecordNotFound(parent_model.__name__)

        parent_mapper = sa_inspect(parent_model)
        child_mapper = sa_inspect(type(record))
        for local, remote in prop.local_remote_pairs:
            setattr(
                record,
                child_mapper.get_property_by_column(remote).key,
                getattr(parent, parent_mapper.get_property_by_column(local).key),
            )

