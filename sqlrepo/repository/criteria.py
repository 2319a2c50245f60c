"""
Query criteria: composable transforms over SQLModel select statements.

A criterion is any object exposing ``apply(query) -> query``. Statements are
generative, so each criterion returns a new statement and never mutates its input.
"""

import operator
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Protocol, Sequence, Tuple, Union, runtime_checkable

from sqlalchemy.orm import selectinload
from sqlmodel.sql.expression import Select, SelectOfScalar

Query = Union[Select, SelectOfScalar]


@runtime_checkable
class Criterion(Protocol):
    """Transform applied to a query; must return the narrowed query."""

    def apply(self, query: Query) -> Query:
        ...


def flatten_criteria(items: Iterable[Any]) -> List[Criterion]:
    """Flatten arbitrarily nested lists/tuples of criteria, keeping order."""
    flat: List[Criterion] = []
    for item in items:
        if isinstance(item, Criterion):
            flat.append(item)
        elif isinstance(item, (list, tuple)):
            flat.extend(flatten_criteria(item))
        else:
            raise TypeError(f"{item!r} is not a criterion (missing apply(query))")
    return flat


def apply_criteria(query: Query, criteria: Sequence[Criterion]) -> Query:
    """Fold criteria left-to-right over query."""
    for criterion in criteria:
        query = criterion.apply(query)
    return query


def query_entity(query: Query):
    """Model class the statement selects from."""
    return query.column_descriptions[0]["entity"]


def _column(query: Query, name: str):
    entity = query_entity(query)
    try:
        return getattr(entity, name)
    except AttributeError:
        raise AttributeError(f"{entity.__name__} has no column '{name}'") from None


_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
    "<>": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "like": lambda column, value: column.like(value),
    "ilike": lambda column, value: column.ilike(value),
    "in": lambda column, value: column.in_(value),
    "not in": lambda column, value: column.not_in(value),
    "is": lambda column, value: column.is_(value),
    "is not": lambda column, value: column.is_not(value),
}


@dataclass(frozen=True)
class Where:
    """Compare a column against a value, e.g. Where("age", 18, ">=")."""
    column: str
    value: Any
    operator: str = "=="

    def apply(self, query: Query) -> Query:
        try:
            compare = _OPERATORS[self.operator.lower()]
        except KeyError:
            raise ValueError(f"Unsupported operator: {self.operator}") from None
        return query.where(compare(_column(query, self.column), self.value))


@dataclass(frozen=True)
class WhereIn:
    column: str
    values: Sequence[Any]

    def apply(self, query: Query) -> Query:
        return query.where(_column(query, self.column).in_(list(self.values)))


@dataclass(frozen=True)
class OrderBy:
    column: str
    direction: str = "asc"

    def apply(self, query: Query) -> Query:
        direction = self.direction.lower()
        if direction not in ("asc", "desc"):
            raise ValueError(f"Order direction must be 'asc' or 'desc', got '{self.direction}'")
        column = _column(query, self.column)
        return query.order_by(column.desc() if direction == "desc" else column.asc())


@dataclass(frozen=True)
class Latest:
    """Newest first."""
    column: str = "created_at"

    def apply(self, query: Query) -> Query:
        return OrderBy(self.column, "desc").apply(query)


@dataclass(frozen=True)
class Oldest:
    """Oldest first."""
    column: str = "created_at"

    def apply(self, query: Query) -> Query:
        return OrderBy(self.column, "asc").apply(query)


@dataclass(frozen=True)
class Limit:
    count: int
    offset: int = 0

    def apply(self, query: Query) -> Query:
        query = query.limit(self.count)
        if self.offset:
            query = query.offset(self.offset)
        return query


@dataclass(frozen=True)
class EagerLoad:
    """Select-in load relationships; dotted paths load nested ones ("posts.comments")."""
    relations: Tuple[str, ...]

    def __init__(self, *relations: str):
        object.__setattr__(self, "relations", tuple(relations))

    def apply(self, query: Query) -> Query:
        options = []
        for path in self.relations:
            entity = query_entity(query)
            loader = None
            for name in path.split("."):
                if not hasattr(entity, name):
                    raise AttributeError(f"{entity.__name__} has no relationship '{name}'")
                attribute = getattr(entity, name)
                loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
                entity = attribute.property.mapper.class_
            options.append(loader)
        return query.options(*options)


@dataclass(frozen=True)
class Scope:
    """Wrap any ``query -> query`` callable as a criterion."""
    callback: Callable[[Query], Query]

    def apply(self, query: Query) -> Query:
        return self.callback(query)
