"""
Repository pattern: entity binding, criteria composition and cached CRUD over SQLModel.
"""

from .base import IRepository, Repository
from .criteria import (
    Criterion,
    EagerLoad,
    Latest,
    Limit,
    Oldest,
    OrderBy,
    Scope,
    Where,
    WhereIn,
)
from .resolver import EntityFactory
from .selects import Page

__all__ = [
    "IRepository",
    "Repository",
    "EntityFactory",
    "Page",
    "Criterion",
    "Where",
    "WhereIn",
    "OrderBy",
    "Latest",
    "Oldest",
    "Limit",
    "EagerLoad",
    "Scope",
]
