"""Source tree traversal and dispatch to the extractors.

The :class:`DiagramBuilder` owns the run: it creates the
:class:`~typegraph.model.ModelRegistry`, walks the source tree in sorted
order, hands every file to each extractor that accepts its extension,
and finally passes the populated registry to an emitter.

Failure containment is per file.  Whatever goes wrong while reading or
scanning one file (undecodable text, a Java syntax error, a missing
optional parser package) is logged, recorded in :attr:`failures`, and
the walk continues with the next file.
"""

from __future__ import annotations

import os
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from .config import DEFAULT_IGNORE_DIRS
from .emitters import emitter_registry
from .extractors import Extractor, extractor_registry
from .model import ModelRegistry


class DiagramBuilder:
    """Build one model from a source tree and emit it."""

    def __init__(
        self,
        languages: Optional[Iterable[str]] = None,
        ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
        extractors: Optional[List[Extractor]] = None,
    ) -> None:
        """Initialize the builder.

        Args:
            languages: Extractor keys to enable; all registered ones when None.
            ignore_dirs: Directory names that are never entered.
            extractors: Ready-made extractor instances, overriding ``languages``.
        """
        self.registry = ModelRegistry()
        if extractors is None:
            extractors = extractor_registry.create_all(languages)
        self.extractors = list(extractors)
        self.ignore_dirs = frozenset(ignore_dirs)
        self.failures: List[Tuple[str, str]] = []
        self.files_read = 0

    def extractors_for(self, path: str) -> List[Extractor]:
        suffix = os.path.splitext(path)[1]
        return [e for e in self.extractors if e.accepts(suffix)]

    def load_file(self, path: str) -> bool:
        """Contribute one file to the model.

        Returns True when the file was read and scanned, False when no
        extractor accepts it or it failed.
        """
        selected = self.extractors_for(path)
        if not selected:
            return False
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
            logger.debug("Reading {} ({} chars)", path, len(text))
            for extractor in selected:
                extractor.contribute(text, self.registry)
        except Exception as exc:
            logger.warning("Skipping {}: {}", path, exc)
            self.failures.append((path, str(exc)))
            return False
        self.files_read += 1
        return True

    def load_tree(self, root: str) -> ModelRegistry:
        """Walk ``root`` recursively and contribute every accepted file."""
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.ignore_dirs)
            for filename in sorted(filenames):
                self.load_file(os.path.join(dirpath, filename))
        logger.debug(
            "Read {} files, {} failed, {} entities",
            self.files_read, len(self.failures), len(self.registry),
        )
        return self.registry

    def emit(self, output_format: str = "plantuml") -> str:
        """Render the model with the emitter registered as ``output_format``."""
        return emitter_registry.create(output_format).emit(self.registry)
