"""Base extractor class and registry.

Every language extractor implements the same narrow contract: given the
text of one file and the run's :class:`~typegraph.model.ModelRegistry`,
locate declarations and contribute what it finds.  Extractors are
registered in :data:`extractor_registry` under a language key and
declare the file extensions they accept.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import FrozenSet

from ..model import Entity, ModelRegistry
from ..registry import Registry
from ..typenames import TypeDialect, record_dependencies

# Registry for language extractor implementations
extractor_registry = Registry("extractor")


class Extractor(ABC):
    """Abstract base class for per-language structural extractors."""

    #: File suffixes (lower case, with the leading dot) handled by this extractor.
    extensions: FrozenSet[str] = frozenset()

    #: Rules used to turn type expressions into dependency candidates.
    dialect: TypeDialect

    @abstractmethod
    def contribute(self, text: str, registry: ModelRegistry) -> None:
        """Add the declarations found in ``text`` to ``registry``.

        The regex-based implementations skip whatever they cannot make
        sense of.  An exception escaping this method marks the whole
        file as failed.
        """
        raise NotImplementedError

    def accepts(self, suffix: str) -> bool:
        return suffix.lower() in self.extensions

    def depends(self, entity: Entity, type_expr: str) -> None:
        """Record dependency edges for every name used in ``type_expr``."""
        record_dependencies(entity, type_expr, self.dialect)
