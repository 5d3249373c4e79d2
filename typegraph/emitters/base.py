"""Base emitter class and registry.

This module defines the abstract :class:`DiagramEmitter` interface, the
``emitter_registry`` for plugin-style registration of concrete output
formats, and the edge helpers every format shares.  Edges are derived
the same way regardless of the output syntax:

* inheritance and realization edges are written for every recorded
  base and interface, declared in the run or not;
* dependency edges are written only when the target is a declared
  entity, so library types never clutter the diagram.

Names within one entity are visited in sorted order so that the output
does not depend on set iteration order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Tuple

from ..model import ModelRegistry
from ..registry import Registry

# Registry for diagram emitter implementations
emitter_registry = Registry("emitter")

Edge = Tuple[str, str]


def inheritance_edges(registry: ModelRegistry) -> List[Edge]:
    """``(base, child)`` pairs."""
    return [(base, entity.name) for entity in registry for base in sorted(entity.bases)]


def realization_edges(registry: ModelRegistry) -> List[Edge]:
    """``(interface, implementor)`` pairs."""
    return [(iface, entity.name) for entity in registry for iface in sorted(entity.interfaces)]


def dependency_edges(registry: ModelRegistry) -> List[Edge]:
    """``(user, used)`` pairs whose target is a declared entity."""
    return [
        (entity.name, target)
        for entity in registry
        for target in sorted(entity.dependencies)
        if registry.contains(target)
    ]


class DiagramEmitter(ABC):
    """Abstract base class for writing a model as a class diagram."""

    @abstractmethod
    def emit(self, registry: ModelRegistry) -> str:
        """Render every entity and relation in ``registry``.

        Args:
            registry: The populated model of one run.

        Returns:
            The complete diagram source text.
        """
        raise NotImplementedError
