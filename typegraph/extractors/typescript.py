"""TypeScript extractor.

Two passes over the comment-free, literal-masked text:

1. ``type Name = ...`` aliases whose right side contains an object
   shape become Interface entities.  Shape members become fields or
   methods, and intersection operands outside the shape become
   dependency candidates.
2. ``class``, ``interface`` and ``enum`` declarations.  The header is
   read for generic bounds, ``extends`` (bases) and ``implements``
   (interfaces); the body is split into member units at top-level line
   breaks and semicolons.
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
    split_top_level_lines,
    strip_comments,
)
from ..typenames import TYPESCRIPT
from .base import Extractor, extractor_registry

_IDENT = r"[A-Za-z_$][\w$]*"
_TYPE_HEADER = re.compile(rf"\b(?P<keyword>class|interface|enum)\s+(?P<name>{_IDENT})")
_ALIAS = re.compile(rf"\btype\s+(?P<name>{_IDENT})\s*")
_IMPLEMENTS = re.compile(r"\bimplements\b")
_MODIFIERS = re.compile(
    r"^(?:(?:public|private|protected|static|abstract|override|readonly|async|declare"
    r"|export|default|accessor)\s+)*"
)
_ACCESSOR = re.compile(rf"^(?P<kind>get|set)\s+(?P<name>#?{_IDENT})\s*\(")
_METHOD = re.compile(rf"^(?P<name>#?{_IDENT})\s*\??\s*(?=[<(])")
_FIELD = re.compile(rf"^(?P<name>#?{_IDENT})\s*[?!]?\s*(?P<rest>[:=].*)?$", re.S)
_PARAMETER_PROPERTY = re.compile(r"^(?:(?:public|private|protected|readonly|override)\s+)+")
_DECORATOR = re.compile(rf"^@{_IDENT}(?:\.{_IDENT})*\s*")

_KINDS = {
    "class": EntityKind.CLASS,
    "interface": EntityKind.INTERFACE,
    "enum": EntityKind.ENUM,
}
_NOT_A_NAME = frozenset({"extends", "implements"})


def _strip_decorators(text: str) -> str:
    text = text.strip()
    while text.startswith("@"):
        match = _DECORATOR.match(text)
        if not match:
            return text
        rest = text[match.end():]
        if rest.startswith("("):
            close = find_matching(rest, 0)
            rest = rest[close + 1:] if close != -1 else ""
        text = rest.strip()
    return text


def _split_generic(token: str) -> Tuple[str, str]:
    """``Base<Order>`` -> ``("Base", "Order")``."""
    token = collapse_whitespace(token)
    open_idx = token.find("<")
    if open_idx == -1:
        return token.rsplit(".", 1)[-1], ""
    close = find_matching(token, open_idx)
    arguments = token[open_idx + 1:close] if close != -1 else token[open_idx + 1:]
    return token[:open_idx].strip().rsplit(".", 1)[-1], arguments


def _alias_end(text: str, start: int) -> int:
    """Index just past the right side of a type alias.

    The right side ends at a top-level ``;`` or at a top-level line break
    that cannot be continued: the text so far does not end with an
    operator and the next line does not start with one.
    """
    depth = 0
    n = len(text)
    for i in range(start, n):
        ch = text[i]
        if ch in "{([<":
            depth += 1
        elif ch in "})]" or (ch == ">" and text[i - 1:i] != "="):
            depth = max(0, depth - 1)
        elif depth == 0 and ch == ";":
            return i
        elif depth == 0 and ch == "\n":
            so_far = text[start:i].strip()
            following = text[i + 1:].lstrip()
            if so_far and so_far[-1] not in "|&=,:<(" and not following.startswith(("|", "&", "=>")):
                return i
    return n


def parameter_types(params: str) -> List[str]:
    """Return the annotated type of every parameter, or ``any``."""
    return [param_type for _, param_type, _ in _parameters(params)]


def _parameters(params: str) -> List[Tuple[str, str, bool]]:
    """Return ``(name, type, is_property)`` for every parameter."""
    result = []
    for raw in split_top_level(params):
        param = _strip_decorators(raw)
        if param.startswith("..."):
            param = param[3:]
        is_property = bool(_PARAMETER_PROPERTY.match(param))
        param = _PARAMETER_PROPERTY.sub("", param)
        assign = find_top_level(param, "=")
        if assign != -1:
            param = param[:assign]
        colon = find_top_level(param, ":")
        if colon == -1:
            name, param_type = param, "any"
        else:
            name, param_type = param[:colon], collapse_whitespace(param[colon + 1:])
        name = name.strip().rstrip("?").strip()
        if name in ("this",):
            continue
        result.append((name, param_type or "any", is_property))
    return result


@extractor_registry.register("typescript")
class TypeScriptExtractor(Extractor):
    """Extract classes, interfaces, enums and object-shaped type aliases."""

    extensions = frozenset({".ts", ".mts", ".cts"})
    dialect = TYPESCRIPT

    def contribute(self, text: str, registry: ModelRegistry) -> None:
        content = mask_literals(strip_comments(text))
        self._parse_aliases(content, registry)
        self._parse_declarations(content, registry)

    # ------------------------------------------------------------------
    # Type aliases

    def _parse_aliases(self, content: str, registry: ModelRegistry) -> None:
        for match in _ALIAS.finditer(content):
            pos = match.end()
            if content.startswith("<", pos):
                close = find_matching(content, pos)
                if close == -1:
                    continue
                pos = close + 1
                while pos < len(content) and content[pos].isspace():
                    pos += 1
            if not content.startswith("=", pos) or content.startswith("==", pos):
                continue
            rhs = content[pos + 1:_alias_end(content, pos + 1)]
            if "{" not in rhs:
                continue

            name = match.group("name")
            entity = registry.get_or_create(name, EntityKind.INTERFACE)
            logger.debug("TS type alias {}", name)
            outside = rhs
            i = 0
            while i < len(rhs):
                if rhs[i] != "{":
                    i += 1
                    continue
                close = find_matching(rhs, i)
                if close == -1:
                    logger.debug("TS alias {} has an unterminated shape", name)
                    break
                self._parse_members(rhs[i + 1:close], entity, shape=True)
                outside = blank(outside, i, close + 1)
                i = close + 1
            for operand in split_top_level(outside, "&|"):
                self.depends(entity, operand)

    # ------------------------------------------------------------------
    # Declarations

    def _parse_declarations(self, content: str, registry: ModelRegistry) -> None:
        pos = 0
        while True:
            match = _TYPE_HEADER.search(content, pos)
            if match is None:
                break
            name = match.group("name")
            if name in _NOT_A_NAME:
                pos = match.end()
                continue
            keyword = match.group("keyword")
            entity = registry.get_or_create(name, _KINDS[keyword])
            logger.debug("TS {} {}", keyword, name)

            header_end = match.end()
            generics = ""
            lead = header_end
            while lead < len(content) and content[lead].isspace():
                lead += 1
            if content.startswith("<", lead):
                close = find_matching(content, lead)
                if close != -1:
                    generics = content[lead + 1:close]
                    header_end = close + 1
            body_start = find_body_start(content, header_end, angle=True)
            header = content[header_end:body_start] if body_start != -1 else ""
            self._parse_generics(generics, entity)
            self._parse_header(header, entity)

            pos = match.end()
            if body_start == -1:
                continue
            body_end = find_matching(content, body_start)
            if body_end == -1:
                logger.debug("TS body of {} is unterminated", name)
                continue
            body = content[body_start + 1:body_end]
            if keyword == "enum":
                self._parse_enum(body, entity)
            else:
                self._parse_members(body, entity, shape=keyword == "interface")
            pos = body_end + 1

    def _parse_generics(self, generics: str, entity: Entity) -> None:
        for param in split_top_level(generics):
            _, found, bound = param.partition(" extends ")
            if not found:
                continue
            assign = find_top_level(bound, "=")
            self.depends(entity, bound[:assign] if assign != -1 else bound)

    def _parse_header(self, header: str, entity: Entity) -> None:
        header = collapse_whitespace(header)
        implements = _IMPLEMENTS.search(header)
        extends_part = header[:implements.start()] if implements else header
        implements_part = header[implements.end():] if implements else ""

        extends_part = extends_part.strip()
        if extends_part.startswith("extends "):
            for token in split_top_level(extends_part[len("extends "):]):
                base, arguments = _split_generic(token.split("(", 1)[0])
                if entity.add_base(base):
                    logger.debug("TS inheritance {} <|-- {}", base, entity.name)
                self.depends(entity, arguments)
        for token in split_top_level(implements_part):
            interface, arguments = _split_generic(token)
            if entity.add_interface(interface):
                logger.debug("TS realization {} <|.. {}", interface, entity.name)
            self.depends(entity, arguments)

    # ------------------------------------------------------------------
    # Bodies

    def _parse_enum(self, body: str, entity: Entity) -> None:
        for raw in split_top_level(body):
            item = raw.split("=", 1)[0].strip()
            if re.match(rf"^{_IDENT}$", item) and entity.add_field(Field(item, "")):
                logger.debug("TS enum member {}.{}", entity.name, item)

    def _member_units(self, body: str, shape: bool) -> List[str]:
        units: List[str] = []
        for line in split_top_level_lines(body):
            for statement in split_top_level(line, ";", angle=False):
                if shape:
                    units.extend(split_top_level(statement, ","))
                else:
                    units.append(statement)
        return units

    def _parse_members(self, body: str, entity: Entity, shape: bool = False) -> None:
        for unit in self._member_units(body, shape):
            text = _strip_decorators(collapse_whitespace(unit))
            text = _MODIFIERS.sub("", text)
            if not text or text[0] in "[(}{<":
                continue
            if text.startswith("constructor") and text[len("constructor"):].lstrip().startswith("("):
                self._parse_constructor(text, entity)
                continue
            accessor = _ACCESSOR.match(text)
            if accessor:
                self._parse_accessor(text, accessor, entity)
                continue
            method = _METHOD.match(text)
            if method and method.group("name") not in ("new",):
                self._parse_method(text, method.group("name"), method.end(), entity)
                continue
            field_match = _FIELD.match(text)
            if field_match:
                self._parse_field(field_match.group("name"), field_match.group("rest") or "", entity)

    def _parse_constructor(self, text: str, entity: Entity) -> None:
        open_idx = text.index("(")
        close = find_matching(text, open_idx)
        params = _parameters(text[open_idx + 1:close] if close != -1 else text[open_idx + 1:])
        for name, param_type, is_property in params:
            self.depends(entity, param_type)
            if is_property and entity.add_field(Field(name, param_type)):
                logger.debug("TS parameter property {}.{}: {}", entity.name, name, param_type)
        self._add_method(entity, entity.name, "void", [t for _, t, _ in params])

    def _parse_accessor(self, text: str, match: re.Match, entity: Entity) -> None:
        name = match.group("name")
        open_idx = match.end() - 1
        close = find_matching(text, open_idx)
        if close == -1:
            return
        if match.group("kind") == "get":
            field_type = self._return_type(text[close + 1:]) or "any"
        else:
            types = parameter_types(text[open_idx + 1:close])
            field_type = types[0] if types else "any"
        self._add_field(entity, name, field_type)

    def _parse_method(self, text: str, name: str, start: int, entity: Entity) -> None:
        open_idx = start
        if text.startswith("<", open_idx):
            close = find_matching(text, open_idx)
            if close == -1:
                return
            open_idx = close + 1
            while open_idx < len(text) and text[open_idx].isspace():
                open_idx += 1
        if not text.startswith("(", open_idx):
            return
        close = find_matching(text, open_idx)
        if close == -1:
            return
        params = parameter_types(text[open_idx + 1:close])
        return_type = self._return_type(text[close + 1:]) or "void"
        self._add_method(entity, name, return_type, params)

    def _parse_field(self, name: str, rest: str, entity: Entity) -> None:
        rest = rest.strip()
        if rest.startswith(":"):
            annotation = rest[1:]
            assign = find_top_level(annotation, "=")
            field_type = collapse_whitespace(annotation[:assign] if assign != -1 else annotation)
            if field_type:
                self._add_field(entity, name, field_type)
            return
        if rest.startswith("="):
            arrow = self._arrow_function(rest[1:].strip())
            if arrow is not None:
                params, return_type = arrow
                self._add_method(entity, name, return_type, params)

    def _arrow_function(self, initializer: str) -> Optional[Tuple[List[str], str]]:
        """Parameter and return types of an arrow-function initializer."""
        if initializer.startswith("async "):
            initializer = initializer[len("async "):].lstrip()
        if initializer.startswith("<"):
            close = find_matching(initializer, 0)
            initializer = initializer[close + 1:].lstrip() if close != -1 else ""
        if not initializer.startswith("("):
            return None
        close = find_matching(initializer, 0)
        if close == -1:
            return None
        tail = initializer[close + 1:]
        arrow = tail.find("=>")
        if arrow == -1:
            return None
        head = tail[:arrow].strip()
        return_type = collapse_whitespace(head[1:]) if head.startswith(":") else "void"
        return parameter_types(initializer[1:close]), return_type or "void"

    @staticmethod
    def _return_type(tail: str) -> str:
        """Read ``: Type`` after a parameter list, stopping at the body."""
        tail = tail.strip()
        if not tail.startswith(":"):
            return ""
        annotation = tail[1:].strip()
        if annotation.startswith("{"):
            close = find_matching(annotation, 0)
            return annotation[:close + 1] if close != -1 else annotation
        brace = find_top_level(annotation, "{")
        if brace != -1:
            annotation = annotation[:brace]
        return collapse_whitespace(annotation)

    # ------------------------------------------------------------------
    # Recording

    def _add_field(self, entity: Entity, name: str, field_type: str) -> None:
        if entity.add_field(Field(name, field_type)):
            logger.debug("TS field {}.{}: {}", entity.name, name, field_type)
        self.depends(entity, field_type)

    def _add_method(self, entity: Entity, name: str, return_type: str, params: List[str]) -> None:
        if entity.add_method(Method(name, return_type, tuple(params))):
            logger.debug("TS method {}.{}({}): {}", entity.name, name, ", ".join(params), return_type)
        for param in params:
            self.depends(entity, param)
        self.depends(entity, return_type)
