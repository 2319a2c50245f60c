"""Repository exception taxonomy."""

from typing import Any, Iterable, List, Optional


class RepositoryException(Exception):
    """Base class for repository exceptions."""
    def __init__(self, message: str, status_code: int = 500, code: int = 500, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.detail = detail


class InvalidEntity(RepositoryException):
    """Resolved entity is not a persistent record type."""
    def __init__(self, entity: Any, reason: Optional[str] = None):
        self.entity = entity
        if entity is None:
            name, message = None, "No entity bound to repository"
        else:
            name = getattr(entity, "__name__", None) or str(entity)
            message = f"{name} is not a persistent SQLModel table model"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, detail={"entity": name})


class ResolutionFailure(RepositoryException):
    """Factory could not construct the requested entity type."""
    def __init__(self, name: str, reason: Optional[str] = None):
        self.name = name
        message = f"Unable to resolve entity [{name}]"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, detail={"entity": name})


class RecordNotFound(RepositoryException):
    """A required single-record lookup returned nothing."""
    def __init__(self, entity_type: str, ids: Iterable[Any] = ()):
        if isinstance(ids, (str, bytes)) or not isinstance(ids, Iterable):
            ids = [ids]
        self.entity_type = entity_type
        self.ids: List[Any] = list(ids)

        message = f"No query results for model [{entity_type}]"
        if self.ids:
            message = f"{message} {', '.join(str(i) for i in self.ids)}"
        super().__init__(
            message,
            status_code=404,
            code=404,
            detail={"entity_type": entity_type, "ids": self.ids},
        )


class InvalidRelation(RepositoryException):
    """Relation name is not a relationship of the bound entity."""
    def __init__(self, entity_type: str, relation: str, reason: Optional[str] = None):
        self.entity_type = entity_type
        self.relation = relation
        message = f"[{relation}] is not a usable relationship of model [{entity_type}]"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            status_code=400,
            code=400,
            detail={"entity_type": entity_type, "relation": relation},
        )
