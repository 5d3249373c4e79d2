"""C# extractor.

C# sources are scanned with regular expressions over comment-free text
whose string literals have been blanked.  Type declarations are located
with a header pattern, their bodies with the balanced-delimiter matcher,
and members with two complementary passes over a copy of the body in
which method bodies and nested type declarations have been hidden:

* a statement pass splits the visible body at top-level ``;`` and
  closing braces and classifies every statement as a method,
  constructor, property or field;
* a line pass re-reads single-line members, which catches members the
  statement pass could not classify because a neighbouring statement
  was malformed.

Both passes feed the same entity, whose field and method identity rules
ensure nothing is counted twice.

C# does not mark which entry of a base list is the base class.  The
policy applied here: for an interface every base is an interface;
otherwise the first entry is the base class and every later entry is an
interface, since a class or struct has at most one base class.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from loguru import logger

from ..model import Entity, EntityKind, Field, Method, ModelRegistry
from ..scanning import (
    blank,
    collapse_whitespace,
    find_body_start,
    find_matching,
    find_top_level,
    mask_literals,
    split_top_level,
    strip_comments,
)
from ..typenames import CSHARP
from .base import Extractor, extractor_registry

_TYPE_HEADER = re.compile(
    r"\b(?P<keyword>record\s+(?:class|struct)|class|interface|struct|record|enum)"
    r"\s+(?P<name>@?[A-Za-z_]\w*)"
)
_DIRECTIVE = re.compile(r"(?m)^[ \t]*#.*$")
_WHERE = re.compile(r"\bwhere\b")
_NAME = re.compile(r"^@?[A-Za-z_][\w.]*$")
_ACCESSOR = re.compile(r"\b(get|set|init)\b")

_KINDS = {
    "class": EntityKind.CLASS,
    "interface": EntityKind.INTERFACE,
    "struct": EntityKind.STRUCT,
    "record": EntityKind.STRUCT,
    "enum": EntityKind.ENUM,
}

MODIFIERS = frozenset({
    "public", "private", "protected", "internal", "static", "virtual", "override",
    "abstract", "async", "sealed", "new", "extern", "unsafe", "partial", "readonly",
    "const", "volatile", "event", "required", "fixed", "implicit", "explicit",
})
PARAMETER_MODIFIERS = frozenset({"ref", "out", "in", "params", "this", "scoped", "readonly"})
_NOT_A_NAME = MODIFIERS | frozenset({"where", "class", "struct", "interface", "enum", "record"})


def _next_header(text: str, pos: int = 0) -> Optional[re.Match]:
    """Find the next type declaration header at or after ``pos``."""
    while True:
        match = _TYPE_HEADER.search(text, pos)
        if match is None or match.group("name") not in _NOT_A_NAME:
            return match
        pos = match.end()


def _strip_attributes(text: str) -> str:
    """Drop leading ``[Attribute(...)]`` groups."""
    text = text.strip()
    while text.startswith("["):
        close = find_matching(text, 0)
        if close == -1:
            return ""
        text = text[close + 1:].strip()
    return text


def _strip_modifiers(text: str) -> str:
    while True:
        first, _, rest = text.partition(" ")
        if first not in MODIFIERS or not rest:
            return text
        text = rest


def split_type_and_name(head: str) -> Optional[Tuple[str, str]]:
    """Split a member head such as ``public static List<int> Items``.

    Returns ``(type, name)`` with modifiers removed, or None when the head
    does not contain both.  A trailing generic parameter list on the
    name (``Map<T>``) is discarded.
    """
    head = collapse_whitespace(head)
    if head.endswith(">"):
        depth = 0
        for i in range(len(head) - 1, -1, -1):
            if head[i] == ">":
                depth += 1
            elif head[i] == "<":
                depth -= 1
                if depth == 0:
                    candidate = head[:i].rstrip()
                    if " " in candidate and re.search(r"\w$", candidate):
                        head = candidate
                    break
    parts = [p for p in split_top_level(head, " ") if p not in MODIFIERS]
    if len(parts) < 2:
        return None
    name = parts[-1]
    type_name = " ".join(parts[:-1])
    if not _NAME.match(name) or ";" in type_name or "=" in type_name:
        return None
    return type_name, name.lstrip("@").rsplit(".", 1)[-1]


def parameter_types(params: str) -> List[str]:
    """Return the declared type of every parameter in a parameter list."""
    types: List[str] = []
    for raw in split_top_level(params):
        param = _strip_attributes(raw)
        assign = find_top_level(param, "=")
        if assign != -1:
            param = param[:assign]
        tokens = [t for t in split_top_level(param, " ") if t not in PARAMETER_MODIFIERS]
        if not tokens:
            continue
        types.append(" ".join(tokens[:-1]) if len(tokens) > 1 else tokens[0])
    return types


@extractor_registry.register("csharp")
class CSharpExtractor(Extractor):
    """Extract types, members and relations from C# source text."""

    extensions = frozenset({".cs"})
    dialect = CSHARP

    def contribute(self, text: str, registry: ModelRegistry) -> None:
        content = mask_literals(_DIRECTIVE.sub("", strip_comments(text)))
        pos = 0
        while True:
            match = _next_header(content, pos)
            if match is None:
                break
            name = match.group("name").lstrip("@")
            keyword = match.group("keyword").split()[0]
            entity = registry.get_or_create(name, _KINDS[keyword])
            logger.debug("C# {} {} at offset {}", keyword, name, match.start())

            header_end = match.end()
            body_start = find_body_start(content, header_end)
            stop = body_start
            if stop == -1:
                semicolon = content.find(";", header_end)
                stop = len(content) if semicolon == -1 else semicolon
            header = content[header_end:stop]
            following = _next_header(header)
            if following is not None:
                # the next declaration starts before any body was found
                header = header[:following.start()]
                body_start = -1
            self._parse_header(header, entity, keyword)

            pos = header_end
            if body_start == -1:
                continue
            body_end = find_matching(content, body_start)
            if body_end == -1:
                logger.debug("C# body of {} is unterminated", name)
                continue
            body = content[body_start + 1:body_end]
            if keyword == "enum":
                self._parse_enum(body, entity)
            else:
                self._parse_members(body, entity)
            pos = body_start + 1

    # ------------------------------------------------------------------
    # Declaration headers

    def _parse_header(self, header: str, entity: Entity, keyword: str) -> None:
        rest = header.strip()
        if rest.startswith("<"):
            close = find_matching(rest, 0)
            rest = rest[close + 1:].strip() if close != -1 else ""
        if rest.startswith("("):
            close = find_matching(rest, 0)
            params = rest[1:close] if close != -1 else rest[1:]
            if keyword == "record":
                self._add_record_fields(params, entity)
            else:
                for param_type in parameter_types(params):
                    self.depends(entity, param_type)
            rest = rest[close + 1:].strip() if close != -1 else ""
        if not rest.startswith(":") or keyword == "enum":
            self._parse_constraints(rest, entity)
            return

        where = _WHERE.search(rest)
        bases_text = rest[1:where.start()] if where else rest[1:]
        if where:
            self._parse_constraints(rest[where.start():], entity)

        for index, token in enumerate(split_top_level(bases_text)):
            # record and primary-constructor bases carry arguments: Base(x)
            token = collapse_whitespace(token.split("(", 1)[0])
            base_name, arguments = self._split_generic(token)
            if not base_name:
                continue
            if keyword == "interface" or index > 0:
                entity.add_interface(base_name)
                logger.debug("C# realization {} <|.. {}", base_name, entity.name)
            else:
                entity.add_base(base_name)
                logger.debug("C# inheritance {} <|-- {}", base_name, entity.name)
            if arguments:
                self.depends(entity, arguments)

    def _parse_constraints(self, text: str, entity: Entity) -> None:
        for clause in _WHERE.split(text)[1:]:
            _, _, bounds = clause.partition(":")
            for bound in split_top_level(bounds):
                self.depends(entity, bound)

    @staticmethod
    def _split_generic(token: str) -> Tuple[str, str]:
        """``Repository<Order>`` -> ``("Repository", "Order")``."""
        open_idx = token.find("<")
        if open_idx == -1:
            return token.rsplit(".", 1)[-1], ""
        close = find_matching(token, open_idx)
        arguments = token[open_idx + 1:close] if close != -1 else token[open_idx + 1:]
        return token[:open_idx].strip().rsplit(".", 1)[-1], arguments

    def _add_record_fields(self, params: str, entity: Entity) -> None:
        for raw in split_top_level(params):
            param = _strip_attributes(raw)
            assign = find_top_level(param, "=")
            if assign != -1:
                param = param[:assign]
            split = split_type_and_name(param)
            if split:
                self._add_field(entity, split[1], split[0])

    # ------------------------------------------------------------------
    # Enum bodies

    def _parse_enum(self, body: str, entity: Entity) -> None:
        for raw in split_top_level(body):
            item = _strip_attributes(raw).split("=", 1)[0].strip()
            if _NAME.match(item) and "." not in item:
                if entity.add_field(Field(item.lstrip("@"), "")):
                    logger.debug("C# enum member {}.{}", entity.name, item)

    # ------------------------------------------------------------------
    # Type bodies

    def _parse_members(self, body: str, entity: Entity) -> None:
        visible = self._blank_blocks(body)
        for statement in self._statements(visible):
            self._parse_statement(statement, entity)
        self._parse_lines(visible, entity)

    def _blank_blocks(self, body: str) -> str:
        """Hide method bodies, accessor bodies and nested type declarations.

        Method and constructor bodies keep their braces but lose their
        contents.  Property blocks keep their outer braces and accessor
        keywords.  Nested type declarations disappear entirely, header
        included, since they are extracted as entities of their own.
        """
        visible = body
        boundary = 0
        i = 0
        while i < len(visible):
            ch = visible[i]
            if ch in ";}":
                boundary = i + 1
            elif ch == "{":
                close = find_matching(visible, i)
                if close == -1:
                    return blank(visible, i + 1, len(visible))
                header = visible[boundary:i]
                nested = _next_header(header)
                if nested is not None and "(" not in header[:nested.start()]:
                    visible = blank(visible, boundary, close + 1)
                elif "(" in header:
                    visible = blank(visible, i + 1, close)
                else:
                    visible = self._blank_accessors(visible, i, close)
                boundary = close + 1
                i = close + 1
                continue
            i += 1
        return visible

    @staticmethod
    def _blank_accessors(text: str, open_idx: int, close_idx: int) -> str:
        i = open_idx + 1
        while i < close_idx:
            if text[i] == "{":
                inner = find_matching(text, i)
                if inner == -1 or inner > close_idx:
                    return blank(text, i, close_idx)
                text = blank(text, i, inner + 1)
                i = inner + 1
                continue
            i += 1
        return text

    @staticmethod
    def _statements(visible: str) -> List[str]:
        statements: List[str] = []
        start = 0
        depth = 0
        for i, ch in enumerate(visible):
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth = max(0, depth - 1)
                if depth == 0:
                    statements.append(visible[start:i + 1])
                    start = i + 1
            elif ch == ";" and depth == 0:
                statements.append(visible[start:i])
                start = i + 1
        if visible[start:].strip():
            statements.append(visible[start:])
        return statements

    def _parse_statement(self, statement: str, entity: Entity) -> None:
        text = _strip_modifiers(collapse_whitespace(_strip_attributes(statement)))
        if not text or text[0] in "=}{~":
            return
        first = text.split(" ", 1)[0]
        if first in ("delegate", "using", "namespace", "return"):
            return
        if _TYPE_HEADER.match(text) or " operator " in f" {text} ":
            return

        lead = 0
        if text.startswith("("):
            # tuple return type
            close = find_matching(text, 0)
            if close == -1:
                return
            lead = close + 1
        paren = find_top_level(text, "(", lead)
        assign = find_top_level(text, "=", lead)
        arrow = find_top_level(text, "=>", lead)
        brace = find_top_level(text, "{", lead)

        def first_of(idx: int, *others: int) -> bool:
            return idx != -1 and all(o == -1 or idx < o for o in others)

        if first_of(paren, assign, arrow, brace):
            self._parse_method(text, paren, entity)
        elif first_of(brace, assign, arrow):
            self._parse_field(text[:brace], entity)
        elif first_of(arrow, assign):
            self._parse_field(text[:arrow], entity)
        else:
            self._parse_field_list(text, entity)

    def _parse_method(self, text: str, paren: int, entity: Entity) -> None:
        head = text[:paren].strip()
        close = find_matching(text, paren)
        params = parameter_types(text[paren + 1:close] if close != -1 else text[paren + 1:])
        split = split_type_and_name(head)
        if split is None:
            # constructors have no return type
            if head != entity.name:
                return
            return_type, name = "void", entity.name
        else:
            return_type, name = split
            if name == entity.name:
                return_type = "void"
        self._add_method(entity, name, return_type, params)

    def _parse_field(self, head: str, entity: Entity) -> None:
        split = split_type_and_name(head)
        if split:
            self._add_field(entity, split[1], split[0])

    def _parse_field_list(self, text: str, entity: Entity) -> None:
        declarators = split_top_level(text)
        if not declarators:
            return
        first = declarators[0]
        assign = find_top_level(first, "=")
        split = split_type_and_name(first[:assign] if assign != -1 else first)
        if split is None:
            return
        field_type, name = split
        self._add_field(entity, name, field_type)
        for extra in declarators[1:]:
            extra_name = extra.split("=", 1)[0].strip()
            if _NAME.match(extra_name) and "." not in extra_name:
                self._add_field(entity, extra_name.lstrip("@"), field_type)

    def _parse_lines(self, visible: str, entity: Entity) -> None:
        for raw in visible.splitlines():
            line = _strip_attributes(raw)
            if not line:
                continue
            if "{" in line and "}" in line and _ACCESSOR.search(line):
                head = line[:line.index("{")]
                if "(" not in head:
                    self._parse_field(head, entity)
                continue
            if line.endswith(";") and ";" not in line[:-1]:
                self._parse_statement(line[:-1], entity)

    # ------------------------------------------------------------------
    # Recording

    def _add_field(self, entity: Entity, name: str, field_type: str) -> None:
        if entity.add_field(Field(name, field_type)):
            logger.debug("C# field {}.{}: {}", entity.name, name, field_type)
        self.depends(entity, field_type)

    def _add_method(self, entity: Entity, name: str, return_type: str, params: List[str]) -> None:
        if entity.add_method(Method(name, return_type, tuple(params))):
            logger.debug("C# method {}.{}({}): {}", entity.name, name, ", ".join(params), return_type)
        for param in params:
            self.depends(entity, param)
        self.depends(entity, return_type)
