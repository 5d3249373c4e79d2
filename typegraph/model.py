"""Unified structural model shared by every language extractor.

This module defines the small set of classes the rest of the package
works with.  An :class:`Entity` represents one declared type (class,
interface, struct or enum) regardless of the language it came from; its
members are described by :class:`Field` and :class:`Method` values.

The :class:`ModelRegistry` is the run-scoped store of entities.  It is
created once per run, handed by reference to every extractor, and
finally read by an emitter.  Entities are created on first sight and
enriched by every later contribution (partial classes, open classes or
the same type declared in several files); nothing is ever removed.

The invariants that make the diagram consistent live here rather than in
the extractors:

* an entity never depends on itself, nor on a name already recorded as
  one of its bases or interfaces;
* methods are unique per entity by ``(name, parameter types)``;
* fields are unique per entity by name;
* the kind of an entity is decided by whichever declaration created it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple


class EntityKind(Enum):
    """Kind of a declared type."""

    CLASS = "class"
    INTERFACE = "interface"
    STRUCT = "struct"
    ENUM = "enum"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Field:
    """A field, property or enum member.

    ``type_name`` is the raw type expression as written in the source;
    it is empty for enum members.
    """

    name: str
    type_name: str = ""

    def __str__(self) -> str:
        if self.type_name:
            return f"{self.name}:{self.type_name}"
        return self.name


@dataclass(frozen=True)
class Method:
    """A method or constructor signature."""

    name: str
    return_type: str = "void"
    parameters: Tuple[str, ...] = ()

    @property
    def signature(self) -> Tuple[str, Tuple[str, ...]]:
        """Identity of the method within one entity."""
        return (self.name, self.parameters)

    def __str__(self) -> str:
        return f"{self.name}({', '.join(self.parameters)}):{self.return_type}"


@dataclass
class Entity:
    """A declared type and everything contributed to it so far."""

    name: str
    kind: EntityKind = EntityKind.CLASS
    fields: List[Field] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)
    bases: Set[str] = field(default_factory=set)
    interfaces: Set[str] = field(default_factory=set)
    dependencies: Set[str] = field(default_factory=set)

    def add_field(self, new_field: Field) -> bool:
        """Append ``new_field`` unless a field of that name exists."""
        if self.get_field(new_field.name) is not None:
            return False
        self.fields.append(new_field)
        return True

    def add_method(self, method: Method) -> bool:
        """Append ``method`` unless its signature is already present."""
        if self.get_method(method.name, method.parameters) is not None:
            return False
        self.methods.append(method)
        return True

    def add_base(self, name: str) -> bool:
        if not name or name == self.name or name in self.bases:
            return False
        self.bases.add(name)
        self.dependencies.discard(name)
        return True

    def add_interface(self, name: str) -> bool:
        if not name or name == self.name or name in self.interfaces:
            return False
        self.interfaces.add(name)
        self.dependencies.discard(name)
        return True

    def add_dependency(self, name: str) -> bool:
        """Record a "uses" edge unless it would violate the invariants."""
        if not name or name == self.name:
            return False
        if name in self.bases or name in self.interfaces or name in self.dependencies:
            return False
        self.dependencies.add(name)
        return True

    def get_field(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_method(self, name: str, parameters: Tuple[str, ...] = ()) -> Optional[Method]:
        for m in self.methods:
            if m.name == name and m.parameters == tuple(parameters):
                return m
        return None

    def __str__(self) -> str:
        return f"{self.kind} {self.name}"


class ModelRegistry:
    """Deduplicating store of entities for one run.

    Entities are kept in first-declaration order, which is also the
    order in which emitters write them.
    """

    def __init__(self) -> None:
        self._entities: Dict[str, Entity] = {}

    def get_or_create(self, name: str, kind: EntityKind = EntityKind.CLASS) -> Entity:
        """Return the entity called ``name``, creating it with ``kind``.

        The ``kind`` argument is ignored when the entity already exists.
        """
        entity = self._entities.get(name)
        if entity is None:
            entity = Entity(name=name, kind=kind)
            self._entities[name] = entity
        return entity

    def get(self, name: str) -> Optional[Entity]:
        return self._entities.get(name)

    def contains(self, name: str) -> bool:
        """Return True when ``name`` is a type declared somewhere in the run."""
        return name in self._entities

    def entities(self) -> List[Entity]:
        return list(self._entities.values())

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def __len__(self) -> int:
        return len(self._entities)
