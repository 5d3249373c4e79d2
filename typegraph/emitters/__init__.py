"""Diagram emitters for the extracted model.

This package contains the supported output formats:
- plantuml: PlantUML class diagram (default)
- mermaid: Mermaid classDiagram rendered from a Jinja2 template

All emitters are automatically registered via decorators.
"""

from .base import DiagramEmitter, emitter_registry
from .plantuml import PlantUmlEmitter
from .mermaid import MermaidEmitter

__all__ = [
    "DiagramEmitter",
    "emitter_registry",
    "PlantUmlEmitter",
    "MermaidEmitter",
]
