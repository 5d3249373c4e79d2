"""Run configuration collected from the command line."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional

# Directories that never contain first-party sources worth diagramming.
DEFAULT_IGNORE_DIRS: FrozenSet[str] = frozenset({
    ".git", "node_modules", "bin", "obj", "build", "dist", "__pycache__",
    ".venv", "venv", "target",
})


@dataclass
class RunConfig:
    """Everything one ``generate`` run needs to know.

    ``output`` of None means standard output.  ``languages`` of None
    means every registered extractor.
    """

    source_root: Path
    output: Optional[Path] = None
    output_format: str = "plantuml"
    languages: Optional[List[str]] = None
    ignore_dirs: FrozenSet[str] = field(default_factory=lambda: DEFAULT_IGNORE_DIRS)
    debug: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "RunConfig":
        return cls(
            source_root=Path(args.source),
            output=Path(args.output) if getattr(args, "output", None) else None,
            output_format=args.format,
            languages=list(args.language) if getattr(args, "language", None) else None,
            ignore_dirs=DEFAULT_IGNORE_DIRS | frozenset(getattr(args, "exclude", None) or []),
            debug=bool(getattr(args, "debug", False)),
        )
