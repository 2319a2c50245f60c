"""
Repository base: entity binding, criteria pipeline and cached access.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Type, Union

from sqlalchemy import inspect as sa_inspect
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from sqlrepo.cache import CacheStore, NullCache
from sqlrepo.config import Settings, settings as default_settings
from sqlrepo.exceptions.errors import InvalidEntity, InvalidRelation, RecordNotFound
from sqlrepo.logging.logger import get_logger
from .criteria import Query, apply_criteria, flatten_criteria
from .resolver import EntityFactory
from .selects import SelectsEntity
from .creates import CreatesEntity
from .updates import UpdatesEntity
from .deletes import DeletesEntity


class IRepository(ABC):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    def entity(self, name: Union[str, type]) -> "IRepository":
        """Bind the repository to an entity."""
        pass

    @abstractmethod
    def with_criteria(self, *criteria) -> "IRepository":
        """Narrow the current query with criteria."""
        pass

    @abstractmethod
    async def all(self) -> List[SQLModel]:
        pass

    @abstractmethod
    async def find(self, id: Any) -> SQLModel:
        pass

    @abstractmethod
    async def create(self, properties: Dict[str, Any]) -> SQLModel:
        pass

    @abstractmethod
    async def update(self, record: Any, properties: Dict[str, Any]) -> SQLModel:
        pass

    @abstractmethod
    async def delete(self, record: Any = None) -> bool:
        pass


class Repository(SelectsEntity, CreatesEntity, UpdatesEntity, DeletesEntity, IRepository):
    """
    Repository over one SQLModel table model.

    Bind an entity with entity() (or set entity_name on a subclass), optionally
    narrow with with_criteria() / relation(), then run CRUD operations:

        users = await Repository(session, cache=cache).entity(User).with_criteria(Latest()).get()

    all() and find() go through the cache while the query is un-narrowed;
    create/update/delete invalidate "<key>.*" and "<key>.<id>".
    """

    entity_name: Optional[Union[str, type]] = None
    cacheable: bool = True

    def __init__(
        self,
        session: AsyncSession,
        cache: Optional[CacheStore] = None,
        factory: Optional[EntityFactory] = None,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.cache = cache if cache is not None else NullCache()
        self.factory = factory or EntityFactory()
        self.settings = settings or default_settings
        self.logger = get_logger(type(self).__name__)

        self.model: Optional[Type[SQLModel]] = None
        self.query: Optional[Query] = None
        self.relation_name: Optional[str] = None
        self._parent_query: Optional[Query] = None
        self._narrowed = False

        if self.entity_name is not None:
            self._resolve_entity()

    # --- Entity binding ---

    def entity(self, name: Union[str, type]) -> "Repository":
        """Bind to entity name (alias, dotted path or model class); replaces prior state."""
        self.entity_name = name
        self._resolve_entity()
        return self

    def relation(self, name: str) -> "Repository":
        """Target the named relationship of the bound entity for following operations."""
        model = self._require_entity()
        relationships = sa_inspect(model).relationships
        if name not in relationships:
            raise InvalidRelation(model.__name__, name, "no such relationship")

        related = relationships[name].mapper.class_
        parent_query = self._parent_query if self.relation_name else self.query

        # Parents are the rows of the full parent query, ordering and limits included
        parent_key = sa_inspect(model).primary_key[0]
        parents = parent_query.subquery()
        query = (
            select(related)
            .join_from(model, getattr(model, name))
            .where(parent_key.in_(select(parents.c[parent_key.key])))
        )

        self._parent_query = parent_query
        self.relation_name = name
        self.query = query
        self._narrowed = True
        return self

    def with_criteria(self, *criteria) -> "Repository":
        """Fold criteria (nested lists allowed) over the current query, in order."""
        self._require_entity()
        criteria = flatten_criteria(criteria)
        # Query only replaced once every criterion succeeded
        self.query = apply_criteria(self.query, criteria)
        if criteria:
            self._narrowed = True
        return self

    def reset(self) -> "Repository":
        """Drop criteria and relation, back to select(<entity>)."""
        self._resolve_entity()
        return self

    @property
    def entity_type(self) -> str:
        """Class name of the operation target."""
        return self._target_model().__name__

    # --- Cache ---

    def cache_key(self) -> str:
        """Cache key prefix; the target model's table name."""
        return self._target_model().__tablename__

    def cache_ttl(self, ttl: Optional[int] = None) -> int:
        """Cache time-to-live in seconds."""
        return self.settings.CACHE_TTL if ttl is None else ttl

    async def invalidate_cache(self, record: Any) -> None:
        """Forget the collection key and the record's key."""
        key = self.cache_key()
        identifier = self._identifier(record)
        await self.cache.forget(f"{key}.*")
        await self.cache.forget(f"{key}.{identifier}")
        self.logger.debug(f"Cache invalidated: {key}.* and {key}.{identifier}")

    async def remember(self, key: str, ttl: int, callback: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached result for key, or compute it, store it for ttl and return it."""
        model = self._target_model()

        payload = await self.cache.get(key)
        if payload is not None:
            self.logger.debug(f"Cache hit: {key}")
            return self._hydrate(model, payload)

        self.logger.debug(f"Cache miss: {key}")
        value = await callback()
        if value is not None:
            await self.cache.put(key, self._dehydrate(value), ttl)
        return value

    def _uses_cache(self) -> bool:
        return self.cacheable and self.settings.CACHE_ENABLED and not self._narrowed

    @staticmethod
    def _dehydrate(value: Any) -> Any:
        if isinstance(value, list):
            return [item.model_dump(mode="json") for item in value]
        return value.model_dump(mode="json")

    @staticmethod
    def _hydrate(model: Type[SQLModel], payload: Any) -> Any:
        if isinstance(payload, list):
            return [model.model_validate(item) for item in payload]
        return model.model_validate(payload)

    # --- Internals ---

    def _resolve_entity(self) -> None:
        """Resolve entity_name through the factory and validate the result."""
        if self.entity_name is None:
            raise InvalidEntity(None)
        model = self.factory.make(self.entity_name)
        if isinstance(model, SQLModel):
            model = type(model)

        if not isinstance(model, type) or not issubclass(model, SQLModel):
            raise InvalidEntity(model, "not a SQLModel class")
        if getattr(model, "__table__", None) is None:
            raise InvalidEntity(model, "declared without table=True")
        if len(sa_inspect(model).primary_key) != 1:
            raise InvalidEntity(model, "a single-column primary key is required")

        self.model = model
        self.query = select(model)
        self.relation_name = None
        self._parent_query = None
        self._narrowed = False
        self.logger.debug(f"Entity bound: {model.__name__} ({model.__tablename__})")

    def _require_entity(self) -> Type[SQLModel]:
        if self.model is None or self.query is None:
            raise InvalidEntity(self.entity_name)
        return self.model

    def _target_model(self) -> Type[SQLModel]:
        model = self._require_entity()
        if self.relation_name:
            return sa_inspect(model).relationships[self.relation_name].mapper.class_
        return model

    def _current_query(self) -> Query:
        self._require_entity()
        return self.query

    @staticmethod
    def _primary_key(model: Type[SQLModel]) -> str:
        mapper = sa_inspect(model)
        return mapper.get_property_by_column(mapper.primary_key[0]).key

    def _primary_column(self):
        model = self._target_model()
        return getattr(model, self._primary_key(model))

    def _identifier(self, record: Any) -> Any:
        """Primary key of record, read from its identity key when it has one."""
        state = sa_inspect(record, raiseerr=False)
        if state is not None and getattr(state, "identity", None):
            return state.identity[0]
        return getattr(record, self._primary_key(self._target_model()))

    def _not_found(self, ids: Iterable[Any] = ()) -> RecordNotFound:
        return RecordNotFound(self.entity_type, ids)
