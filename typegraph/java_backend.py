"""tree-sitter backed syntax parsing for Java sources.

Unlike the regex scanners used for the other languages, Java sources
are handed to a real parser: the ``tree_sitter`` bindings loaded with
the ``tree_sitter_java`` grammar.  The Java extractor only needs one
capability from it, ``parse(source_text) -> tree``, so any object with
that method can be injected in its place (tests use a fake).

Because the grammar ships as a compiled extension, this module raises
an :class:`ImportError` at parse time when the packages cannot be
imported.  There is no fallback to a handwritten Java scanner.  A tree
that contains syntax errors is rejected with :class:`SourceParseError`
so that a broken file is reported and skipped instead of contributing
half-recovered declarations.
"""

from __future__ import annotations

from typing import Any, Optional

try:
    import tree_sitter_java  # type: ignore[import]
    from tree_sitter import Language, Parser  # type: ignore[import]
except Exception:
    tree_sitter_java = None  # type: ignore
    Language = Parser = None  # type: ignore


class SourceParseError(RuntimeError):
    """Raised when a syntax backend rejects a source file."""


def _first_error(node: Any) -> Optional[Any]:
    """Return the first ``ERROR`` or missing node below ``node``."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


class JavaSyntaxBackend:
    """Parse Java source text into a tree-sitter syntax tree."""

    def __init__(self) -> None:
        self._parser: Optional[Parser] = None  # type: ignore[valid-type]

    def parse(self, text: str) -> Any:
        """Parse ``text`` and return the tree.

        Raises:
            ImportError: If ``tree_sitter`` or ``tree_sitter_java`` is missing.
            SourceParseError: If the source contains syntax errors.
        """
        if tree_sitter_java is None:
            raise ImportError(
                "tree-sitter and tree-sitter-java are required to read Java sources. "
                "Install them via `pip install tree-sitter tree-sitter-java`."
            )
        if self._parser is None:
            self._parser = Parser(Language(tree_sitter_java.language()))
        tree = self._parser.parse(text.encode("utf-8"))
        if tree.root_node.has_error:
            error = _first_error(tree.root_node)
            line = error.start_point[0] + 1 if error is not None else 0
            raise SourceParseError(f"syntax error near line {line}")
        return tree
