"""
Entity factory: turns entity names into SQLModel model classes.
"""

from importlib import import_module
from typing import Any, Callable, Dict, Optional, Union

from sqlrepo.exceptions.errors import ResolutionFailure

Binding = Union[type, Callable[[], Any]]


class EntityFactory:
    """Registry of entity bindings; unknown dotted names are imported on demand."""

    def __init__(self, bindings: Optional[Dict[str, Binding]] = None):
        self._bindings: Dict[str, Binding] = {}
        for name, binding in (bindings or {}).items():
            self.register(name, binding)

    def register(self, name: Union[str, type], binding: Optional[Binding] = None) -> "EntityFactory":
        """Bind name to a model class or a zero-argument factory; a bare class binds under its own name."""
        if binding is None:
            if not isinstance(name, type):
                raise TypeError("register() needs a binding when name is a string")
            name, binding = name.__name__, name
        self._bindings[name] = binding
        return self

    def has(self, name: str) -> bool:
        return name in self._bindings

    def make(self, name: Union[str, type]) -> Any:
        """Produce the entity for name; raises ResolutionFailure when nothing can be built."""
        if isinstance(name, type):
            return name

        if name in self._bindings:
            binding = self._bindings[name]
            if isinstance(binding, type):
                return binding
            try:
                return binding()
            except Exception as e:
                raise ResolutionFailure(name, str(e)) from e

        if "." in name:
            module_path, _, attribute = name.rpartition(".")
            try:
                return getattr(import_module(module_path), attribute)
            except (ImportError, AttributeError) as e:
                raise ResolutionFailure(name, str(e)) from e

        raise ResolutionFailure(name, "no binding registered")
