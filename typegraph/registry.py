"""Decorator-based plugin registry for extractors and emitters.

Language extractors and diagram emitters are registered under a short
key so that the builder and the command line can look them up without
if-else chains.  Adding a language or an output format means adding a
module with a decorated class; nothing else changes.

Example usage::

    emitter_registry = Registry("emitter")

    @emitter_registry.register("plantuml")
    class PlantUmlEmitter(DiagramEmitter):
        ...

    emitter = emitter_registry.create("plantuml")
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar

T = TypeVar("T")


class Registry:
    """Map string keys to classes and instantiate them on demand."""

    def __init__(self, name: str = "registry") -> None:
        """Initialize the registry.

        Args:
            name: Human-readable name used in error messages.
        """
        self._name = name
        self._items: Dict[str, Type[Any]] = {}

    def register(self, key: str) -> Callable[[Type[T]], Type[T]]:
        """Decorator registering a class under ``key``.

        Raises:
            ValueError: If the key is already registered.
        """
        def decorator(cls: Type[T]) -> Type[T]:
            if key in self._items:
                raise ValueError(
                    f"{self._name}: key '{key}' already registered "
                    f"to {self._items[key].__name__}"
                )
            self._items[key] = cls
            return cls
        return decorator

    def get(self, key: str) -> Type[Any]:
        """Return the class registered under ``key``.

        Raises:
            KeyError: If the key is not registered.
        """
        if key not in self._items:
            available = ", ".join(sorted(self._items.keys()))
            raise KeyError(
                f"{self._name}: unknown key '{key}'. "
                f"Available: {available}"
            )
        return self._items[key]

    def create(self, key: str, **kwargs: Any) -> Any:
        """Instantiate the class registered under ``key`` with ``kwargs``."""
        return self.get(key)(**kwargs)

    def create_all(self, keys: Optional[Iterable[str]] = None) -> List[Any]:
        """Instantiate every registered class, or only those in ``keys``.

        Instances are returned in registration order when ``keys`` is
        omitted, otherwise in the order of ``keys``.
        """
        selected = list(self._items.keys()) if keys is None else list(keys)
        return [self.create(key) for key in selected]

    def keys(self) -> List[str]:
        """Return the registered keys (useful for argparse choices)."""
        return list(self._items.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
