"""PlantUML class diagram emitter."""

from __future__ import annotations

from typing import List

from ..model import Entity, ModelRegistry
from .base import (
    DiagramEmitter,
    dependency_edges,
    emitter_registry,
    inheritance_edges,
    realization_edges,
)


@emitter_registry.register("plantuml")
class PlantUmlEmitter(DiagramEmitter):
    """Render the model as a PlantUML ``@startuml`` document.

    Example output::

        @startuml

        class Order {
          id : int
          Total() : decimal
        }

        Entity <|-- Order
        IAuditable <|.. Order

        Order ..> Customer

        @enduml
    """

    def __init__(self, indent: str = "  ") -> None:
        self.indent = indent

    def _entity_block(self, entity: Entity) -> List[str]:
        lines = [f"{entity.kind} {entity.name} {{"]
        for f in entity.fields:
            if f.type_name:
                lines.append(f"{self.indent}{f.name} : {f.type_name}")
            else:
                lines.append(f"{self.indent}{f.name}")
        for m in entity.methods:
            lines.append(f"{self.indent}{m.name}({', '.join(m.parameters)}) : {m.return_type}")
        lines.append("}")
        return lines

    def emit(self, registry: ModelRegistry) -> str:
        lines = ["@startuml", ""]
        for entity in registry:
            lines.extend(self._entity_block(entity))
            lines.append("")

        relations = [f"{base} <|-- {child}" for base, child in inheritance_edges(registry)]
        relations += [f"{iface} <|.. {impl}" for iface, impl in realization_edges(registry)]
        if relations:
            lines.extend(relations)
            lines.append("")

        dependencies = [f"{user} ..> {used}" for user, used in dependency_edges(registry)]
        if dependencies:
            lines.extend(dependencies)
            lines.append("")

        lines.append("@enduml")
        return "\n".join(lines) + "\n"
