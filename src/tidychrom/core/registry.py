"""Registry of operator classes used to rebuild serialized pipelines."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

import pydantic

from .exceptions import RegistryError, RepeatedIdError

T = TypeVar("T", bound=pydantic.BaseModel)

CLASS_KEY = "class"
"""The key used to store the operator class name in serialized operators."""


class Registry(Generic[T]):
    """Map class names to pydantic model classes."""

    def __init__(self, name: str):
        self._name = name
        self._records: dict[str, type[T]] = dict()

    def __contains__(self, id_: str) -> bool:
        return id_ in self._records

    def get(self, id_: str) -> type[T]:
        """Retrieve a class from the registry."""
        if id_ not in self._records:
            raise RegistryError(f"Entry {id_} not found in {self._name} registry.")
        return self._records[id_]

    def list_entries(self) -> list[str]:
        """List the names of all registered classes."""
        return sorted(self._records)

    def register(self, entry: type[T]) -> type[T]:
        """Add a class to the registry using its name as key.

        Use as a decorator.

        """
        id_ = entry.__name__
        if id_ in self._records:
            raise RepeatedIdError(f"{id_} is already registered in the {self._name} registry.")

        self._records[id_] = entry
        return entry

    def dump(self, instance: T) -> dict[str, Any]:
        """Serialize a registered class instance into a JSON serializable dictionary."""
        d = instance.model_dump(mode="json")
        d[CLASS_KEY] = instance.__class__.__name__
        return d

    def load(self, d: dict[str, Any]) -> T:
        """Create a new instance from a dictionary created with :py:meth:`dump`.

        :raises RegistryError: if the dictionary does not contain a registered class name.

        """
        d = d.copy()
        id_ = d.pop(CLASS_KEY, None)
        if not isinstance(id_, str):
            raise RegistryError(f"Serialized {self._name} must contain the `{CLASS_KEY}` field.")
        return self.get(id_)(**d)


operator_registry = Registry("operator")
