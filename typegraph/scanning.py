"""Text-scanning primitives shared by the regex-based extractors.

None of the extractors has a grammar.  They recover structure with a
handful of small scanners that understand just enough lexical syntax to
stay out of trouble:

* string and character literals are opaque, including escaped
  (``"a\\"b"``), verbatim (``@"a""b"``), interpolated (``$"{x}"``,
  ``$@"..."``) and template (`````a ${b}`````) forms;
* comments are removed before anything else is looked at;
* nesting depth is tracked so that a separator inside ``(...)``,
  ``[...]``, ``{...}`` or ``<...>`` is never treated as top level.

Index-returning helpers follow :meth:`str.find` and return ``-1`` when
nothing is found.  Callers treat ``-1`` as "body missing", never as an
error.
"""

from __future__ import annotations

from typing import List

PAIRS = {"{": "}", "(": ")", "[": "]", "<": ">"}

_QUOTES = "\"'`"


def literal_end(text: str, index: int) -> int:
    """Return the index just past a literal starting at ``index``.

    Returns ``-1`` when no string or character literal starts there.
    Plain ``'`` and ``"`` literals cannot span lines, so an unterminated
    one ends at the line break; verbatim and template literals run to
    their closing quote or to the end of the text.
    """
    n = len(text)
    prefix = 0
    verbatim = False
    while index + prefix < n and prefix < 2 and text[index + prefix] in "@$":
        verbatim = verbatim or text[index + prefix] == "@"
        prefix += 1
    start = index + prefix
    if start >= n or text[start] not in _QUOTES:
        return -1
    quote = text[start]
    if prefix and quote != '"':
        return -1

    i = start + 1
    if verbatim:
        while i < n:
            if text[i] == '"':
                if i + 1 < n and text[i + 1] == '"':
                    i += 2
                    continue
                return i + 1
            i += 1
        return n

    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            return i
        i += 1
    return n


def strip_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of literals.

    Line breaks inside block comments are kept so that line-oriented
    passes still see the same statement boundaries.
    """
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        end = literal_end(text, i) if text[i] in "\"'`@$" else -1
        if end > i:
            out.append(text[i:end])
            i = end
            continue
        if text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline == -1 else newline
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            stop = n if close == -1 else close + 2
            out.append("\n" * text.count("\n", i, stop))
            i = stop
            continue
        out.append(text[i])
        i += 1
    return "".join(out)


def mask_literals(text: str) -> str:
    """Blank the contents of every literal, keeping prefixes and quotes.

    The result has the same length and line structure as ``text``, so
    indices found in it are valid in the original.
    """
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        end = literal_end(text, i) if text[i] in "\"'`@$" else -1
        if end <= i:
            out.append(text[i])
            i += 1
            continue
        quote = i
        while text[quote] not in _QUOTES:
            quote += 1
        closed = end - 1 > quote and text[end - 1] == text[quote]
        stop = end - 1 if closed else end
        out.append(text[i:quote + 1])
        out.append(blank(text[quote + 1:stop], 0, stop - quote - 1))
        if closed:
            out.append(text[end - 1])
        i = end
    return "".join(out)


def find_matching(text: str, open_index: int) -> int:
    """Return the index of the delimiter closing the one at ``open_index``.

    The opening character decides the pair (``{}``, ``()``, ``[]`` or
    ``<>``).  Literals never affect depth.  For angle brackets the ``>``
    of an arrow (``=>``) is ignored.
    """
    if open_index < 0 or open_index >= len(text):
        return -1
    opener = text[open_index]
    closer = PAIRS.get(opener)
    if closer is None:
        return -1

    depth = 0
    i = open_index
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'`@$":
            end = literal_end(text, i)
            if end > i:
                i = end
                continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            if opener == "<" and i > 0 and text[i - 1] == "=":
                i += 1
                continue
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def find_body_start(text: str, start: int, angle: bool = False) -> int:
    """Find the ``{`` opening the body of a declaration header.

    The search skips literals and parenthesised text and gives up at a
    top-level ``;``, so a body-less declaration never claims the body
    of the declaration that follows it.  With ``angle`` set, braces in
    type arguments such as ``Base<{ id: string }>`` are skipped too.
    """
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'`@$":
            end = literal_end(text, i)
            if end > i:
                i = end
                continue
        if ch in "([" or (angle and ch == "<"):
            depth += 1
        elif ch in ")]" or (angle and ch == ">" and text[i - 1:i] != "="):
            depth = max(0, depth - 1)
        elif depth == 0:
            if ch == "{":
                return i
            if ch == ";":
                return -1
        i += 1
    return -1


def find_top_level(text: str, target: str, start: int = 0) -> int:
    """Index of ``target`` outside any nesting, or -1.

    Call on literal-masked text.  ``=`` only matches a plain assignment,
    never ``==``, ``=>``, ``<=``, ``>=`` or ``!=``.
    """
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if depth == 0 and text.startswith(target, i):
            if target != "=":
                return i
            if text[i + 1:i + 2] not in ("=", ">") and text[i - 1:i] not in ("=", "!", "<", ">"):
                return i
        if ch in "([{<":
            depth += 1
        elif ch in ")]}" or (ch == ">" and text[i - 1:i] != "="):
            depth = max(0, depth - 1)
    return -1


def split_top_level(text: str, separators: str = ",", angle: bool = True) -> List[str]:
    """Split ``text`` at separators that are not nested.

    Nesting is tracked for ``()``, ``[]`` and ``{}`` and, unless
    ``angle`` is false, for ``<>``.  Parts are stripped and empty parts
    dropped.
    """
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'`":
            end = literal_end(text, i)
            if end > i:
                current.append(text[i:end])
                i = end
                continue
        if ch in "([{" or (angle and ch == "<"):
            depth += 1
        elif ch in ")]}" or (angle and ch == ">" and not (i > 0 and text[i - 1] == "=")):
            depth = max(0, depth - 1)
        if ch in separators and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def split_top_level_lines(text: str) -> List[str]:
    """Split a block into logical lines.

    A line break only ends a unit when brace and parenthesis depth are
    both zero, so multi-line signatures, initializers and member bodies
    stay in one unit.
    """
    units: List[str] = []
    current: List[str] = []
    braces = 0
    parens = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'`@$":
            end = literal_end(text, i)
            if end > i:
                current.append(text[i:end])
                i = end
                continue
        if ch == "{":
            braces += 1
        elif ch == "}":
            braces = max(0, braces - 1)
        elif ch == "(":
            parens += 1
        elif ch == ")":
            parens = max(0, parens - 1)

        if ch == "\n" and braces == 0 and parens == 0:
            units.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    if current:
        units.append("".join(current))
    return units


def blank(text: str, start: int, end: int) -> str:
    """Replace ``text[start:end]`` with spaces, keeping line breaks."""
    if start >= end:
        return text
    hidden = "".join("\n" if ch == "\n" else " " for ch in text[start:end])
    return text[:start] + hidden + text[end:]


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())
