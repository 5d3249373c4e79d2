"""Python extractor.

Python has no braces to match, so scope is tracked by indentation.  The
source is first turned into logical lines (physical lines joined while
brackets are open or a backslash continues them, comments removed,
triple-quoted strings collapsed) and each logical line carries the
column of its first character, tabs counting as four columns.

A stack of open scopes is maintained while walking the lines.  A line
closes every scope whose header is indented at least as far as the line
itself; ``class`` lines open class scopes and ``def`` lines open method
scopes directly under a class, function scopes anywhere else.  Only two
places contribute fields: annotated assignments directly in a class
body, and ``self.x = ...`` assignments directly in ``__init__``.
"""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from loguru import logger

from ..model import Entity, EntityKind, Field, Method, ModelRegistry
from ..scanning import find_matching, find_top_level, literal_end, split_top_level
from ..typenames import PYTHON
from .base import Extractor, extractor_registry

ENUM_MARKERS = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})
ABSTRACT_MARKERS = frozenset({"ABC", "Protocol"})
IGNORED_BASES = frozenset({"object", "Generic"})
TAB_WIDTH = 4

_CLASS = re.compile(r"^class\s+(?P<name>[A-Za-z_]\w*)\s*(?P<rest>.*)$", re.S)
_DEF = re.compile(r"^(?:async\s+)?def\s+(?P<name>[A-Za-z_]\w*)\s*(?P<rest>.*)$", re.S)
_SELF_TARGET = re.compile(r"^self\.(?P<name>[A-Za-z_]\w*)\s*(?::\s*(?P<annotation>.+))?$", re.S)
_ANNOTATED = re.compile(r"^(?P<name>[A-Za-z_]\w*)\s*:\s*(?P<annotation>.+)$", re.S)
_NAME = re.compile(r"^[A-Za-z_]\w*$")


@dataclass
class _Scope:
    kind: str
    indent: int
    entity: Optional[Entity] = None
    name: str = ""
    params: Dict[str, str] = field(default_factory=dict)


def logical_lines(text: str) -> List[Tuple[int, str]]:
    """Return ``(indent, line)`` pairs for every non-empty logical line."""
    lines: List[Tuple[int, str]] = []
    current: List[str] = []
    indent = 0
    depth = 0
    at_line_start = True
    i = 0
    n = len(text)
    while i < n:
        if at_line_start:
            indent = 0
            while i < n and text[i] in " \t":
                indent += TAB_WIDTH if text[i] == "\t" else 1
                i += 1
            at_line_start = False
            continue
        ch = text[i]
        if ch in "\"'":
            triple = ch * 3
            if text.startswith(triple, i):
                close = i + 3
                while True:
                    close = text.find(triple, close)
                    if close == -1 or text[close - 1] != "\\":
                        break
                    close += 1
                current.append(ch * 2)
                i = n if close == -1 else close + 3
                continue
            end = literal_end(text, i)
            current.append(text[i:end])
            i = end
            continue
        if ch == "#":
            newline = text.find("\n", i)
            i = n if newline == -1 else newline
            continue
        if ch == "\\" and text.startswith("\n", i + 1):
            current.append(" ")
            i += 2
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        if ch == "\n":
            i += 1
            if depth > 0:
                current.append(" ")
                continue
            line = "".join(current).strip()
            if line:
                lines.append((indent, line))
            current = []
            at_line_start = True
            continue
        current.append(ch)
        i += 1
    line = "".join(current).strip()
    if line:
        lines.append((indent, line))
    return lines


def _header_end(text: str) -> int:
    """Index of the ``:`` closing a ``class`` or ``def`` header, or -1."""
    depth = 0
    for i, ch in enumerate(text):
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        elif ch == ":" and depth == 0:
            return i
    return -1


@extractor_registry.register("python")
class PythonExtractor(Extractor):
    """Extract classes, their bases and members from Python source."""

    extensions = frozenset({".py", ".pyi"})
    dialect = PYTHON

    def contribute(self, text: str, registry: ModelRegistry) -> None:
        scopes: List[_Scope] = []
        for indent, line in logical_lines(text):
            if line.startswith("@"):
                continue
            while scopes and indent <= scopes[-1].indent:
                scopes.pop()
            self._parse_line(line, indent, scopes, registry)

    def _parse_line(self, line: str, indent: int, scopes: List[_Scope], registry: ModelRegistry) -> None:
        top = scopes[-1] if scopes else None
        match = _CLASS.match(line)
        if match:
            entity, inline = self._parse_class(match.group("name"), match.group("rest"), registry)
            scopes.append(_Scope("class", indent, entity))
            self._parse_inline(inline, indent, scopes, registry)
            return
        match = _DEF.match(line)
        if match:
            if top is not None and top.kind == "class":
                scope, inline = self._parse_def(match.group("name"), match.group("rest"), top.entity)
                scope.indent = indent
            else:
                scope, inline = _Scope("function", indent), ""
            scopes.append(scope)
            self._parse_inline(inline, indent, scopes, registry)
            return
        if top is None:
            return
        if top.kind == "class":
            self._parse_class_statement(line, top.entity)
        elif top.kind == "method" and top.name == "__init__":
            self._parse_init_statement(line, top)

    def _parse_inline(self, inline: str, indent: int, scopes: List[_Scope], registry: ModelRegistry) -> None:
        """Handle a body written on the header line, e.g. ``class A: x: int``."""
        for statement in split_top_level(inline, ";", angle=False):
            self._parse_line(statement, indent, scopes, registry)

    # ------------------------------------------------------------------
    # Headers

    def _parse_class(self, name: str, rest: str, registry: ModelRegistry) -> Tuple[Entity, str]:
        rest = rest.strip()
        if rest.startswith("["):
            close = find_matching(rest, 0)
            rest = rest[close + 1:].strip() if close != -1 else ""
        arguments = ""
        if rest.startswith("("):
            close = find_matching(rest, 0)
            arguments = rest[1:close] if close != -1 else rest[1:]
            rest = rest[close + 1:] if close != -1 else ""
        colon = _header_end(rest)
        inline = rest[colon + 1:].strip() if colon != -1 else ""

        kind = EntityKind.CLASS
        bases: List[Tuple[str, str]] = []
        for argument in split_top_level(arguments, angle=False):
            assign = find_top_level(argument, "=")
            if assign != -1:
                key = argument[:assign].strip()
                value = argument[assign + 1:].strip()
                if key == "metaclass" and value.rsplit(".", 1)[-1] == "ABCMeta":
                    kind = EntityKind.INTERFACE
                continue
            outer, _, subscript = argument.partition("[")
            base = outer.strip().rsplit(".", 1)[-1]
            if base in ENUM_MARKERS:
                kind = EntityKind.ENUM
            elif base in ABSTRACT_MARKERS:
                if kind is not EntityKind.ENUM:
                    kind = EntityKind.INTERFACE
            elif base not in IGNORED_BASES and _NAME.match(base):
                bases.append((base, subscript.rsplit("]", 1)[0] if subscript else ""))

        entity = registry.get_or_create(name, kind)
        logger.debug("Python {} {}", kind, name)
        for base, type_arguments in bases:
            if entity.add_base(base):
                logger.debug("Python inheritance {} <|-- {}", base, name)
            self.depends(entity, type_arguments)
        return entity, inline

    def _parse_def(self, name: str, rest: str, entity: Entity) -> Tuple[_Scope, str]:
        rest = rest.strip()
        if rest.startswith("["):
            close = find_matching(rest, 0)
            rest = rest[close + 1:].strip() if close != -1 else ""
        params_text = ""
        if rest.startswith("("):
            close = find_matching(rest, 0)
            params_text = rest[1:close] if close != -1 else rest[1:]
            rest = rest[close + 1:] if close != -1 else ""
        colon = _header_end(rest)
        annotation = rest[:colon] if colon != -1 else rest
        inline = rest[colon + 1:].strip() if colon != -1 else ""

        params = self._parameters(params_text)
        scope = _Scope("method", 0, entity, name, dict(params))
        if name == "__init__":
            for _, param_type in params:
                self.depends(entity, param_type)
            return scope, inline

        annotation = annotation.strip()
        return_type = annotation[2:].strip() if annotation.startswith("->") else ""
        method = Method(name, return_type or "void", tuple(t for _, t in params))
        if entity.add_method(method):
            logger.debug("Python method {}.{}", entity.name, method)
        for _, param_type in params:
            self.depends(entity, param_type)
        self.depends(entity, return_type)
        return scope, inline

    @staticmethod
    def _parameters(params_text: str) -> List[Tuple[str, str]]:
        """Return ``(name, type)`` pairs, ``self``/``cls`` and separators excluded."""
        params: List[Tuple[str, str]] = []
        for raw in split_top_level(params_text, angle=False):
            if raw in ("*", "/"):
                continue
            assign = find_top_level(raw, "=")
            declaration = raw[:assign] if assign != -1 else raw
            colon = find_top_level(declaration, ":")
            if colon == -1:
                name, annotation = declaration, ""
            else:
                name, annotation = declaration[:colon], declaration[colon + 1:]
            name = name.strip().lstrip("*")
            if name in ("self", "cls"):
                continue
            params.append((name, " ".join(annotation.split()) or "any"))
        return params

    # ------------------------------------------------------------------
    # Statements

    def _parse_class_statement(self, line: str, entity: Entity) -> None:
        assign = find_top_level(line, "=")
        target = (line[:assign] if assign != -1 else line).strip()
        match = _ANNOTATED.match(target)
        if match and not keyword.iskeyword(match.group("name")):
            self._add_field(entity, match.group("name"), " ".join(match.group("annotation").split()))
        elif (entity.kind is EntityKind.ENUM and assign != -1 and _NAME.match(target)
              and not target.startswith("_")):
            if entity.add_field(Field(target, "")):
                logger.debug("Python enum member {}.{}", entity.name, target)

    def _parse_init_statement(self, line: str, scope: _Scope) -> None:
        if not line.startswith("self."):
            return
        assign = find_top_level(line, "=")
        target = line[:assign] if assign != -1 else line
        match = _SELF_TARGET.match(target.strip())
        if not match:
            return
        annotation = match.group("annotation")
        value = line[assign + 1:].strip() if assign != -1 else ""
        if annotation:
            field_type = " ".join(annotation.split())
        elif value in scope.params:
            field_type = scope.params[value]
        else:
            field_type = "any"
        self._add_field(scope.entity, match.group("name"), field_type)

    def _add_field(self, entity: Entity, name: str, field_type: str) -> None:
        if entity.add_field(Field(name, field_type)):
            logger.debug("Python field {}.{}: {}", entity.name, name, field_type)
        self.depends(entity, field_type)
