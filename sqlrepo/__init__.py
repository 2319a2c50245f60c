"""
sqlrepo: repositories over SQLModel with criteria and cached reads.
"""

from sqlrepo.exceptions.errors import (
    InvalidEntity,
    InvalidRelation,
    RecordNotFound,
    RepositoryException,
    ResolutionFailure,
)
from sqlrepo.repository import EntityFactory, Page, Repository

__version__ = "1.0.0"

__all__ = [
    "Repository",
    "EntityFactory",
    "Page",
    "RepositoryException",
    "InvalidEntity",
    "ResolutionFailure",
    "RecordNotFound",
    "InvalidRelation",
]
