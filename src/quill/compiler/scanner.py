"""Balanced-token scanning for directive statements and code regions.

The directive grammar needs nested-parenthesis awareness
(``@if(count($items) > max(1, $n))``), which regular expressions cannot
express portably. This module implements it as a single left-to-right pass
with a bracket-depth counter that skips over string literals.

Functions:
    iter_directives(text): Yield every ``@name`` / ``@name(args)`` token
    find_closing_paren(text, start): Index of the matching ``)``
    find_island_end(text, start): Index of the ``?>`` closing a code island
    split_top_level(text, separator): Split outside brackets and strings

"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

_NAME = re.compile(r"\w+(?:->\w+)?", re.ASCII)
_WORD_CHAR = re.compile(r"\w")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())
_QUOTES = frozenset("'\"")


@dataclass(frozen=True, slots=True)
class DirectiveToken:
    """One directive occurrence in template text.

    Attributes:
        start: Offset of the leading ``@``
        end: Offset just past the token (past ``)`` when arguments were consumed)
        name: Directive name without ``@`` (may contain ``->member``)
        arguments: Text between the outer parentheses, or None when absent
        escaped: True for ``@@name``, which is never compiled
        unclosed: True when ``(`` followed the name but was never closed
    """

    start: int
    end: int
    name: str
    arguments: str | None
    escaped: bool = False
    unclosed: bool = False

    @property
    def raw_arguments(self) -> str:
        """Arguments as written, including parentheses."""
        return "" if self.arguments is None else f"({self.arguments})"


def _string_end(text: str, pos: int) -> int | None:
    """Offset just past the string literal starting at `pos`, or None if unclosed."""
    quote = text[pos]
    i = pos + 1
    length = len(text)
    while i < length:
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == quote:
            return i + 1
        i += 1
    return None


def _skip_string(text: str, pos: int) -> int:
    """Return the offset just past the string literal starting at `pos`."""
    end = _string_end(text, pos)
    return len(text) if end is None else end


def find_closing_paren(text: str, start: int, *, quotes: bool = True) -> int | None:
    """Find the ``)`` matching the ``(`` at `start`.

    Parentheses inside string literals are ignored. A quote that is never
    closed is free text (``@lang(it's here)``): the text is then rescanned
    counting parentheses only. Returns None when the text ends before the
    parenthesis is balanced.

    Example:
            >>> find_closing_paren("(a, f(b), ')')x", 0)
            13
            >>> find_closing_paren("(it's here)", 0)
            10
            >>> find_closing_paren("(a, (b)", 0) is None
            True
    """
    depth = 0
    i = start
    length = len(text)
    while i < length:
        char = text[i]
        if quotes and char in _QUOTES:
            end = _string_end(text, i)
            if end is None:
                return find_closing_paren(text, start, quotes=False)
            i = end
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def find_island_end(text: str, start: int) -> int:
    """Offset of the ``?>`` closing the code island whose body starts at `start`.

    String literals are skipped, so ``'?>'`` inside an expression does not
    end the island. A ``#`` comment runs to the end of its line or to the
    next ``?>``. Returns -1 when the island is never closed.

    Example:
            >>> find_island_end("x = '?>' ?>tail", 0)
            9
            >>> find_island_end("# don't ?>", 0)
            8
    """
    i = start
    length = len(text)
    while i < length:
        char = text[i]
        if char in _QUOTES:
            end = _string_end(text, i)
            if end is None:
                return text.find("?>", i)
            i = end
            continue
        if char == "#":
            close = text.find("?>", i)
            newline = text.find("\n", i)
            if newline == -1 or (close != -1 and close < newline):
                return close
            i = newline + 1
            continue
        if text.startswith("?>", i):
            return i
        i += 1
    return -1


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on a single-character separator outside brackets and strings.

    Example:
            >>> split_top_level("$a, f($b, $c), '[x, y]'")
            ['$a', ' f($b, $c)', " '[x, y]'"]
            >>> split_top_level("if (a and\\n  b):\\nx = 1", "\\n")
            ['if (a and\\n  b):', 'x = 1']
    """
    parts: list[str] = []
    depth = 0
    last = 0
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char in _QUOTES:
            i = _skip_string(text, i)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == separator and depth == 0:
            parts.append(text[last:i])
            last = i + 1
        i += 1
    parts.append(text[last:])
    return parts


def iter_directives(text: str) -> Iterator[DirectiveToken]:
    """Yield directive tokens in order of appearance.

    A directive starts with ``@`` not preceded by a word character, so
    addresses like ``user@example.com`` are not tokens. Spaces or tabs may
    separate the name from its argument list. Arguments of a token are not
    scanned for further directives.

    Example:
            >>> [t.name for t in iter_directives("@if($x) a@b @@if @endif")]
            ['if', 'if', 'endif']
    """
    length = len(text)
    pos = text.find("@")
    while pos != -1:
        if pos > 0 and _WORD_CHAR.match(text[pos - 1]):
            pos = text.find("@", pos + 1)
            continue

        escaped = pos + 1 < length and text[pos + 1] == "@"
        name_match = _NAME.match(text, pos + 2 if escaped else pos + 1)
        if name_match is None:
            pos = text.find("@", pos + 1)
            continue

        name = name_match.group()
        end = name_match.end()
        paren = end
        while paren < length and text[paren] in " \t":
            paren += 1

        if paren < length and text[paren] == "(":
            close = find_closing_paren(text, paren)
            if close is None:
                yield DirectiveToken(pos, end, name, None, escaped=escaped, unclosed=True)
                pos = text.find("@", end)
                continue
            yield DirectiveToken(pos, close + 1, name, text[paren + 1 : close], escaped=escaped)
            pos = text.find("@", close + 1)
            continue

        yield DirectiveToken(pos, end, name, None, escaped=escaped)
        pos = text.find("@", end)
