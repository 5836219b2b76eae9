"""Code generation from island-marked text to a Python module source.

The rewriter passes leave plain text interleaved with code islands:

- ``<?py ... ?>``: structured code. Logical lines use block keywords
  (``if ...:``, ``for ...:``, ``elif ...:``, ``else:``) and close blocks with
  a bare ``end`` line. Indentation is computed here.
- ``<?py! ... ?>``: raw code from ``@php ... @endphp``. It is dedented and
  emitted verbatim at the current indentation.

Literal text becomes ``__rt.write('...')`` calls. A single newline directly
after ``?>`` is consumed, so a directive on its own line leaves no blank line.

Example:
        >>> print(CodeGenerator("demo").generate("<?py if x: ?>\\nyes\\n<?py end ?>\\n"))
        if x:
            __rt.write('yes\\n')

"""

from __future__ import annotations

import re
import textwrap

from quill.compiler.expressions import translate_code
from quill.compiler.scanner import find_island_end, split_top_level
from quill.environment.exceptions import UnbalancedBlockError

_ISLAND_OPEN = re.compile(r"<\?py(?:(!)|(?=\s))")
_NEWLINE = re.compile(r"\r?\n")
_CONTINUATION = re.compile(r"^(?:elif\b|else\s*:|except\b|finally\s*:)")

INDENT = "    "


class CodeGenerator:
    """Turn island-marked text into Python module source.

    A generator is single-use: create one per compilation so counters and
    indentation never leak between templates.
    """

    __slots__ = ("_depth", "_lines", "_name", "_statements")

    def __init__(self, name: str | None = None):
        self._name = name
        self._lines: list[str] = []
        self._depth = 0
        # statements emitted per open block; an empty block gets `pass`
        self._statements: list[int] = [0]

    def generate(self, text: str) -> str:
        pos = 0
        while (match := _ISLAND_OPEN.search(text, pos)) is not None:
            close = find_island_end(text, match.end())
            if close == -1:
                break
            self._emit_text(text[pos : match.start()])
            body = text[match.end() : close]
            if match.group(1):
                self._emit_raw(body)
            else:
                self._emit_code(body)
            pos = close + 2
            if newline := _NEWLINE.match(text, pos):
                pos = newline.end()
        self._emit_text(text[pos:])

        if self._depth:
            raise UnbalancedBlockError(
                f"{self._depth} block(s) still open at end of template "
                "(missing @endif, @endforeach or similar)",
                name=self._name,
            )
        return "\n".join(self._lines) + "\n" if self._lines else ""

    def _emit(self, line: str) -> None:
        self._lines.append(INDENT * self._depth + line)
        self._statements[-1] += 1

    def _open(self) -> None:
        self._depth += 1
        self._statements.append(0)

    def _close(self) -> None:
        if not self._depth:
            raise UnbalancedBlockError(
                "Block closed but none is open (unexpected @end directive)",
                name=self._name,
            )
        if not self._statements[-1]:
            self._emit("pass")
        self._statements.pop()
        self._depth -= 1

    def _emit_text(self, text: str) -> None:
        if text:
            self._emit(f"__rt.write({text!r})")

    def _emit_code(self, code: str) -> None:
        for line in split_top_level(code, "\n"):
            line = line.strip()
            if not line:
                continue
            line = translate_code(line)
            if line == "end":
                self._close()
            elif _CONTINUATION.match(line):
                self._close()
                self._emit(line)
                self._open()
            elif line.endswith(":"):
                self._emit(line)
                self._open()
            else:
                self._emit(line)

    def _emit_raw(self, code: str) -> None:
        for line in textwrap.dedent(translate_code(code)).splitlines():
            if line.strip():
                self._emit(line.rstrip())
