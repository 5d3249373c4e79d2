"""Decomposition of raw type expressions into referenced type names.

A field declared as ``Dictionary<string, List<Order>>`` uses ``Order``;
``Optional[Customer]`` uses ``Customer``.  :func:`decompose` turns any
such expression into the set of base names it mentions, and
:func:`record_dependencies` filters that set through the language's
primitive names before recording dependency edges on an entity.

Each language supplies a :class:`TypeDialect` describing its generic
delimiters, its generic container allowlist (wrappers such as ``List``
or ``Promise`` that denote shape rather than a relation) and its
primitive names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Set

from loguru import logger

from .model import Entity
from .scanning import find_matching, find_top_level, split_top_level

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")
_ARRAY_SUFFIX = re.compile(r"\[[\s,]*\]$")
_STRING_LITERAL = re.compile(r"\"[^\"]*\"|'[^']*'|`[^`]*`")


@dataclass(frozen=True)
class TypeDialect:
    """Per-language rules for reading type expressions."""

    name: str
    containers: FrozenSet[str] = frozenset()
    primitives: FrozenSet[str] = frozenset()
    open_delim: str = "<"
    union_separators: str = ""
    lowercase_primitives: bool = False
    drop_words: FrozenSet[str] = field(default_factory=frozenset)
    opaque: FrozenSet[str] = field(default_factory=frozenset)

    def is_primitive(self, name: str) -> bool:
        if name in self.primitives:
            return True
        return self.lowercase_primitives and name[:1].islower()


CSHARP = TypeDialect(
    name="csharp",
    containers=frozenset({
        "List", "IList", "ICollection", "IEnumerable", "IReadOnlyList",
        "IReadOnlyCollection", "Dictionary", "IDictionary", "IReadOnlyDictionary",
        "HashSet", "ISet", "Queue", "Stack", "Task", "ValueTask", "Nullable",
        "Tuple", "ValueTuple", "Func", "Action", "IAsyncEnumerable", "Lazy",
        "ConcurrentDictionary", "SortedDictionary", "LinkedList", "Span",
        "ReadOnlySpan", "Memory",
    }),
    primitives=frozenset({
        "int", "long", "short", "byte", "float", "double", "decimal", "bool",
        "char", "string", "object", "void", "String", "Object",
    }),
    lowercase_primitives=True,
    drop_words=frozenset({"ref", "out", "in", "params", "readonly", "scoped", "this"}),
)

TYPESCRIPT = TypeDialect(
    name="typescript",
    containers=frozenset({
        "Array", "ReadonlyArray", "Promise", "PromiseLike", "Map", "ReadonlyMap",
        "Set", "ReadonlySet", "WeakMap", "WeakSet", "Record", "Partial",
        "Readonly", "Required", "Pick", "Omit", "NonNullable", "Iterable",
        "AsyncIterable", "Iterator",
    }),
    primitives=frozenset({
        "string", "number", "boolean", "void", "any", "unknown", "never", "null",
        "undefined", "object", "bigint", "symbol", "this", "true", "false",
    }),
    union_separators="|&",
    drop_words=frozenset({"readonly", "keyof", "typeof", "unique"}),
)

PYTHON = TypeDialect(
    name="python",
    containers=frozenset({
        "List", "list", "Dict", "dict", "Set", "set", "FrozenSet", "frozenset",
        "Tuple", "tuple", "Optional", "Union", "Iterable", "Iterator", "Sequence",
        "MutableSequence", "Mapping", "MutableMapping", "Callable", "Type", "type",
        "Awaitable", "Coroutine", "AsyncIterator", "AsyncIterable", "Generator",
        "AsyncGenerator", "ClassVar", "Final", "Annotated", "Literal", "Collection",
        "DefaultDict", "defaultdict", "Deque", "deque", "OrderedDict",
    }),
    primitives=frozenset({
        "int", "float", "str", "bytes", "bool", "complex", "None", "object",
        "any", "Any", "void", "bytearray",
    }),
    open_delim="[",
    union_separators="|",
    opaque=frozenset({"Literal"}),
)

JAVA = TypeDialect(
    name="java",
    containers=frozenset({
        "List", "ArrayList", "LinkedList", "Map", "HashMap", "TreeMap",
        "LinkedHashMap", "Set", "HashSet", "TreeSet", "Collection", "Iterable",
        "Optional", "Stream", "Future", "CompletableFuture", "Supplier",
        "Function", "Consumer",
    }),
    primitives=frozenset({
        "int", "long", "short", "byte", "float", "double", "boolean", "char",
        "void", "String", "Object", "Integer", "Long", "Double", "Boolean",
    }),
)


def _clean(expr: str, dialect: TypeDialect) -> str:
    cleaned = expr.strip()
    if dialect.open_delim == "[":
        # forward references: "Order" names the class Order
        cleaned = _STRING_LITERAL.sub(lambda m: m.group(0)[1:-1], cleaned)
    else:
        cleaned = _STRING_LITERAL.sub("", cleaned)
    cleaned = cleaned.replace("?", "").replace("!", "").replace("*", "")
    if dialect.drop_words:
        words = [w for w in cleaned.split(" ") if w not in dialect.drop_words]
        cleaned = " ".join(words)
    cleaned = cleaned.strip()
    while _ARRAY_SUFFIX.search(cleaned) and not _is_wrapped(cleaned, "["):
        cleaned = _ARRAY_SUFFIX.sub("", cleaned).strip()
    return cleaned


def _is_wrapped(text: str, opener: str) -> bool:
    """True when ``text`` is one bracketed group, e.g. ``[A, B]``."""
    return bool(text) and text[0] == opener and find_matching(text, 0) == len(text) - 1


def _simple_name(token: str) -> str:
    return token.rsplit(".", 1)[-1]


def _is_compound(member: str, dialect: TypeDialect) -> bool:
    """True for a union, intersection or function type inside a group."""
    if "=>" in member:
        return True
    if not dialect.union_separators:
        return False
    return len(split_top_level(member, dialect.union_separators)) > 1


def _decompose_function(params: str, returns: str, dialect: TypeDialect) -> Set[str]:
    """Names used by the parameter annotations and result of ``(a: A) => R``."""
    if params.startswith("<"):
        close = find_matching(params, 0)
        params = params[close + 1:].strip() if close != -1 else ""
    result = decompose(returns, dialect)
    if not _is_wrapped(params, "("):
        return result
    for param in split_top_level(params[1:-1]):
        colon = find_top_level(param, ":")
        if colon != -1:
            result |= decompose(param[colon + 1:], dialect)
    return result


def decompose(expr: str, dialect: TypeDialect) -> Set[str]:
    """Return the set of base type names referenced by ``expr``.

    Container wrappers from the dialect's allowlist are omitted; their
    arguments are not.  Decomposing a bare name returns ``{name}``.
    """
    cleaned = _clean(expr or "", dialect)
    if not cleaned:
        return set()

    if dialect.union_separators:
        alternatives = split_top_level(cleaned, dialect.union_separators)
        if len(alternatives) > 1:
            result: Set[str] = set()
            for alternative in alternatives:
                result |= decompose(alternative, dialect)
            return result

    for opener in "([":
        if _is_wrapped(cleaned, opener):
            result = set()
            for member in split_top_level(cleaned[1:-1]):
                tokens = member.split()
                target = member
                if len(tokens) > 1 and "<" not in member and not _is_compound(member, dialect):
                    # named tuple element: "(int Count, Order Last)"
                    target = tokens[0]
                result |= decompose(target, dialect)
            return result

    arrow = find_top_level(cleaned, "=>") if cleaned[0] in "(<" else -1
    if arrow > 0:
        return _decompose_function(cleaned[:arrow].strip(), cleaned[arrow + 2:], dialect)

    start = cleaned.find(dialect.open_delim)
    if start <= 0:
        if _IDENTIFIER.match(cleaned):
            return {_simple_name(cleaned)}
        return set()

    outer = cleaned[:start].strip()
    close = find_matching(cleaned, start)
    if close == -1:
        close = len(cleaned)
    result = set()
    if _simple_name(outer) in dialect.opaque:
        return result
    if _IDENTIFIER.match(outer) and _simple_name(outer) not in dialect.containers:
        result.add(_simple_name(outer))
    for argument in split_top_level(cleaned[start + 1:close]):
        result |= decompose(argument, dialect)
    return result


def record_dependencies(entity: Entity, expr: str, dialect: TypeDialect) -> None:
    """Record a dependency edge on ``entity`` for each name in ``expr``."""
    if not expr or not expr.strip():
        return
    for name in sorted(decompose(expr, dialect)):
        if dialect.is_primitive(name):
            continue
        if entity.add_dependency(name):
            logger.debug("{} edge {} ..> {}", dialect.name, entity.name, name)
