"""Mermaid class diagram emitter.

Renders the model through a Jinja2 template into a ``classDiagram``
block that can be pasted into Markdown.  Mermaid writes generic type
arguments between tildes, so ``List<Order>`` becomes ``List~Order~``.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from ..model import EntityKind, ModelRegistry
from .base import (
    DiagramEmitter,
    dependency_edges,
    emitter_registry,
    inheritance_edges,
    realization_edges,
)

# Template directory
TEMPLATES_DIR = Path(__file__).parent / "templates"

ANNOTATIONS = {
    EntityKind.INTERFACE: "interface",
    EntityKind.ENUM: "enumeration",
    EntityKind.STRUCT: "struct",
}


def mermaid_type(type_name: str) -> str:
    """Rewrite generic angle brackets to Mermaid's tilde notation."""
    return type_name.replace("<", "~").replace(">", "~")


@emitter_registry.register("mermaid")
class MermaidEmitter(DiagramEmitter):
    """Render the model as a Mermaid ``classDiagram``."""

    def __init__(self) -> None:
        """Initialize emitter with Jinja2 environment."""
        self._env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["mermaid_type"] = mermaid_type

    def emit(self, registry: ModelRegistry) -> str:
        template = self._env.get_template("mermaid.jinja2")
        entities = [
            {
                "name": entity.name,
                "annotation": ANNOTATIONS.get(entity.kind, ""),
                "fields": entity.fields,
                "methods": entity.methods,
            }
            for entity in registry
        ]
        return template.render(
            entities=entities,
            inheritance=inheritance_edges(registry),
            realizations=realization_edges(registry),
            dependencies=dependency_edges(registry),
        )
