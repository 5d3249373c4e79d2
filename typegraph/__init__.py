"""Top level package for the typegraph class-diagram extractor.

This package reads a mixed-language source tree (C#, TypeScript,
Python and Java) and produces a class diagram of the types declared in
it: their kinds, members, inheritance and realization relations, and
the "uses" dependencies between them.

Key concepts:

* **Model classes** describe declared types in a language-neutral way.
  See :mod:`typegraph.model`.
* **Scanning primitives** and the **type-name decomposer** are the
  shared building blocks of the regex-based extractors.  See
  :mod:`typegraph.scanning` and :mod:`typegraph.typenames`.
* **Extractors** turn the text of one file into model contributions.
  See :mod:`typegraph.extractors`.
* **Emitters** provide pluggable output formats (PlantUML, Mermaid).
  See :mod:`typegraph.emitters`.
* **Registry** enables decorator-based plugin registration.
  See :mod:`typegraph.registry`.
* **Builder** walks a source tree and ties the pieces together.
  See :mod:`typegraph.builder`.
"""

from .model import EntityKind, Field, Method, Entity, ModelRegistry
from .registry import Registry
from .extractors import Extractor, extractor_registry
from .emitters import DiagramEmitter, emitter_registry
from .builder import DiagramBuilder
from .config import RunConfig

__all__ = [
    "EntityKind",
    "Field",
    "Method",
    "Entity",
    "ModelRegistry",
    "Registry",
    "Extractor",
    "extractor_registry",
    "DiagramEmitter",
    "emitter_registry",
    "DiagramBuilder",
    "RunConfig",
]
