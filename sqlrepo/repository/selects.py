"""Read operations for Repository."""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from sqlmodel import SQLModel, func, select

from .criteria import Where, apply_criteria


@dataclass
class Page:
    """One page of records plus pagination info."""

    items: List[SQLModel] = field(default_factory=list)
    total: int = 0
    per_page: int = 15
    page: int = 1

    @property
    def last_page(self) -> int:
        return max((self.total + self.per_page - 1) // self.per_page, 1)

    @property
    def has_next(self) -> bool:
        return self.page < self.last_page

    @property
    def has_previous(self) -> bool:
        return self.page > 1


class SelectsEntity:
    """Select operations; mixed into Repository."""

    async def get(self) -> List[SQLModel]:
        """Run the current query."""
        result = await self.session.exec(self._current_query())
        return list(result.all())

    async def all(self) -> List[SQLModel]:
        """All records of the current query, cached under "<key>.*" when un-narrowed."""
        if self._uses_cache():
            return await self.remember(f"{self.cache_key()}.*", self.cache_ttl(), self.get)
        return await self.get()

    async def first(self) -> Optional[SQLModel]:
        result = await self.session.exec(self._current_query().limit(1))
        return result.first()

    async def first_or_fail(self) -> SQLModel:
        record = await self.first()
        if record is None:
            raise self._not_found()
        return record

    async def find(self, id: Any) -> SQLModel:
        """Record with primary key id, cached under "<key>.<id>" when un-narrowed."""
        if self._uses_cache():
            return await self.remember(
                f"{self.cache_key()}.{id}", self.cache_ttl(), lambda: self._find_or_fail(id)
            )
        return await self._find_or_fail(id)

    async def find_many(self, ids: Iterable[Any]) -> List[SQLModel]:
        """Records for every id, in the order requested; raises if any is missing."""
        ids = list(ids)
        if not ids:
            return []

        primary_key = self._primary_key(self._target_model())
        result = await self.session.exec(
            self._current_query().where(self._primary_column().in_(ids))
        )
        found = {getattr(record, primary_key): record for record in result.all()}
        keys = [self._coerce_id(i) for i in ids]
        if any(key not in found for key in keys):
            raise self._not_found(ids)
        return [found[key] for key in keys]

    async def find_one(self, **filters) -> Optional[SQLModel]:
        """Find one record by filters (e.g. username='admin')."""
        result = await self.session.exec(self._filtered(filters).limit(1))
        return result.first()

    async def find_all(self, **filters) -> List[SQLModel]:
        """Find records by filters."""
        result = await self.session.exec(self._filtered(filters))
        return list(result.all())

    async def count(self) -> int:
        """Count records matching the current query."""
        subquery = self._current_query().order_by(None).subquery()
        result = await self.session.exec(select(func.count()).select_from(subquery))
        return result.one()

    async def exists(self) -> bool:
        return await self.first() is not None

    async def paginate(self, per_page: Optional[int] = None, page: int = 1) -> Page:
        if per_page is None:
            per_page = self.settings.DEFAULT_PER_PAGE
        if per_page < 1 or page < 1:
            raise ValueError("per_page and page must be positive")

        total = await self.count()
        result = await self.session.exec(
            self._current_query().limit(per_page).offset((page - 1) * per_page)
        )
        return Page(items=list(result.all()), total=total, per_page=per_page, page=page)

    def _coerce_id(self, id: Any) -> Any:
        """id converted to the primary-key column's Python type, as the database compares it."""
        try:
            python_type = self._primary_column().type.python_type
        except NotImplementedError:
            return id
        if isinstance(id, python_type):
            return id
        try:
            return python_type(id)
        except (TypeError, ValueError):
            return id

    async def _find(self, id: Any) -> Optional[SQLModel]:
        result = await self.session.exec(
            self._current_query().where(self._primary_column() == id).limit(1)
        )
        return result.first()

    async def _find_or_fail(self, id: Any) -> SQLModel:
        record = await self._find(id)
        if record is None:
            raise self._not_found([id])
        return record

    def _filtered(self, filters: dict):
        return apply_criteria(
            self._current_query(), [Where(key, value) for key, value in filters.items()]
        )

    async def _locate(self, record_or_id: Any = None) -> SQLModel:
        """Session-bound record for a record, a primary key, or (None) the first row of the current query."""
        if record_or_id is None:
            return await self.first_or_fail()
        if isinstance(record_or_id, SQLModel):
            record_or_id = self._identifier(record_or_id)
        return await self._find_or_fail(record_or_id)
