"""Basic directive compilation for the Quill compiler.

Provides mixin for output helpers (json, method), variable handling (set,
unset), inline code (php) and early exit.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NoReturn

from quill.compiler.scanner import split_top_level

_STATUS = re.compile(r"^\s*-?\d+\s*$")


class BasicStatementMixin:
    """Mixin for compiling basic directives.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    if TYPE_CHECKING:
        # From Compiler core
        def _require(self, args: str | None) -> str: ...

        def _fail(self, message: str) -> NoReturn: ...

    def _compile_json(self, args: str | None) -> str:
        """`@json($data)` or `@json($data, 2)` with an indent."""
        parts = [part.strip() for part in split_top_level(self._require(args))]
        return f"<?py __rt.write(__json({', '.join(parts[:2])})) ?>"

    def _compile_unset(self, args: str | None) -> str:
        return f"<?py del {self._require(args)} ?>"

    def _compile_set(self, args: str | None) -> str:
        """`@set('name', expr)` assigns into the template namespace."""
        parts = split_top_level(self._require(args))
        if len(parts) != 2:
            self._fail("Expected a variable name and a value")
        target = parts[0].strip().strip("'\"").lstrip("$")
        if not target:
            self._fail("Expected a variable name and a value")
        return f"<?py {target} = {parts[1].strip()} ?>"

    def _compile_php(self, args: str | None) -> str:
        # bare @php opens a raw block, resolved after extensions run
        if args is None or not args.strip():
            return "@php"
        return f"<?py {args.strip()} ?>"

    def _compile_endphp(self, args: str | None) -> str:
        return "@endphp"

    def _compile_method(self, args: str | None) -> str:
        return (
            '<input type="hidden" name="_method" value="'
            f'<?py __rt.write(__e(str({self._require(args)}).upper())) ?>">\n'
        )

    def _compile_exit(self, args: str | None) -> str:
        """`@exit` stops rendering; `@exit($cond)` only when the condition holds."""
        if args is None or not args.strip() or _STATUS.match(args):
            return "<?py __rt.exit() ?>"
        return f"<?py if ({args.strip()}): __rt.exit() ?>"
