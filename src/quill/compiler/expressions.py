"""Lexical conversions applied to expression and code text.

Directive arguments and echo expressions are opaque Python source. Two
conveniences keep templates familiar to authors of `$variable` syntax:

- ``$name`` becomes ``name``
- ``->`` becomes ``.`` (``$loop->index`` reads as ``loop.index``)

Both apply only outside string literals.
"""

from __future__ import annotations

import re

_IDENT_START = re.compile(r"[A-Za-z_]")
_ECHO_DEFAULT = re.compile(r"^(?=\$)(.+?)\s+or\s+(.+?)$", re.DOTALL)


def translate_code(code: str) -> str:
    """Convert ``$name`` and ``->`` outside string literals.

    Example:
            >>> translate_code("$user->name + ' costs $5'")
            "user.name + ' costs $5'"
    """
    if "$" not in code and "->" not in code:
        return code

    out: list[str] = []
    i = 0
    length = len(code)
    while i < length:
        char = code[i]
        if char in "'\"":
            j = i + 1
            while j < length:
                if code[j] == "\\":
                    j += 2
                    continue
                if code[j] == char:
                    j += 1
                    break
                j += 1
            out.append(code[i:j])
            i = j
            continue
        if char == "$" and i + 1 < length and _IDENT_START.match(code[i + 1]):
            i += 1
            continue
        if char == "-" and code.startswith("->", i):
            out.append(".")
            i += 2
            continue
        out.append(char)
        i += 1
    return "".join(out)


def compile_echo_defaults(expression: str) -> str:
    """Rewrite ``$a or 'fallback'`` to "`$a` if set, else the fallback".

    Only expressions starting with ``$`` are rewritten, so plain boolean
    ``or`` between other operands is left alone.

    Example:
            >>> compile_echo_defaults("$name or 'Guest'")
            "($name if __isset(lambda: $name) else 'Guest')"
            >>> compile_echo_defaults("a or b")
            'a or b'
    """
    return _ECHO_DEFAULT.sub(r"(\1 if __isset(lambda: \1) else \2)", expression)
