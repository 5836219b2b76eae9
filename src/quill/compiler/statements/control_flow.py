"""Control flow directive compilation for the Quill compiler.

Provides mixin for compiling conditionals, loops and switches.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NoReturn

from quill.compiler.scanner import split_top_level

_LEVEL = re.compile(r"^\s*-?\d+\s*$")
_FOREACH = re.compile(r"^(.+?)\s+as\s+(.+)$", re.DOTALL)


class ControlFlowMixin:
    """Mixin for compiling control flow directives.

    Loops over `@foreach` and `@forelse` keep the `loop` variable current
    through the runtime loop stack:

        ```
        __loopdata = __rt.push_loop(items)
        for item in __loopdata:
            loop = __rt.advance_loop()
            ...
        loop = __rt.pop_loop()
        ```

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # Host attributes (from Compiler.__init__)
        _switch_stack: list[list[int]]
        _forelse_stack: list[list[int]]

        # From Compiler core
        def _next_id(self) -> int: ...

        def _require(self, args: str | None) -> str: ...

        def _fail(self, message: str) -> NoReturn: ...

    # ─────────────────────────────────────────────────────────────────────────
    # Conditionals
    # ─────────────────────────────────────────────────────────────────────────

    def _compile_if(self, args: str | None) -> str:
        return f"<?py if ({self._require(args)}): ?>"

    def _compile_elseif(self, args: str | None) -> str:
        return f"<?py elif ({self._require(args)}): ?>"

    def _compile_else(self, args: str | None) -> str:
        return "<?py else: ?>"

    def _compile_unless(self, args: str | None) -> str:
        return f"<?py if not ({self._require(args)}): ?>"

    def _compile_isset(self, args: str | None) -> str:
        """`@isset($a, $b)` is true when every operand is defined and not None."""
        thunks = ", ".join(
            f"lambda: ({operand.strip()})" for operand in split_top_level(self._require(args))
        )
        return f"<?py if __isset({thunks}): ?>"

    def _compile_end(self, args: str | None) -> str:
        return "<?py end ?>"

    # ─────────────────────────────────────────────────────────────────────────
    # Switch
    # ─────────────────────────────────────────────────────────────────────────

    def _compile_switch(self, args: str | None) -> str:
        """Open a one-shot `for` so `@break` leaves the switch.

        The island stays open until the first `@case` or `@default` closes
        it, which keeps any whitespace between them out of the output.
        """
        subject = self._require(args)
        n = self._next_id()
        self._switch_stack.append([n, 0])
        return f"<?py for __switch_{n} in (({subject}),):\n__matched_{n} = False\n"

    def _case(self, condition: str) -> str:
        if not self._switch_stack:
            self._fail("Case outside of a switch")
        state = self._switch_stack[-1]
        n = state[0]
        body = f"\nif __matched_{n} or {condition}:\n__matched_{n} = True ?>"
        state[1] += 1
        if state[1] == 1:
            return body
        return "<?py end" + body

    def _compile_case(self, args: str | None) -> str:
        if not self._switch_stack:
            self._fail("Case outside of a switch")
        n = self._switch_stack[-1][0]
        return self._case(f"__switch_{n} == ({self._require(args)})")

    def _compile_default(self, args: str | None) -> str:
        return self._case("True")

    def _compile_endswitch(self, args: str | None) -> str:
        if not self._switch_stack:
            self._fail("Endswitch without a switch")
        _, cases = self._switch_stack.pop()
        if not cases:
            return "\nend ?>"
        return "<?py end\nend ?>"

    # ─────────────────────────────────────────────────────────────────────────
    # Loops
    # ─────────────────────────────────────────────────────────────────────────

    def _compile_for(self, args: str | None) -> str:
        return f"<?py for {self._require(args)}: ?>"

    def _compile_while(self, args: str | None) -> str:
        return f"<?py while ({self._require(args)}): ?>"

    def _loop_header(self, args: str | None) -> tuple[str, str, str]:
        """Split `items as item` / `items as key => value`."""
        match = _FOREACH.match(self._require(args))
        if match is None:
            self._fail("Expected '<iterable> as <variable>'")
        iteratee, target = match.group(1).strip(), match.group(2).strip()
        if "=>" in target:
            key, value = (part.strip() for part in target.split("=>", 1))
            return iteratee, f"{key}, {value}", "__pairs(__loopdata)"
        return iteratee, target, "__loopdata"

    def _compile_foreach(self, args: str | None) -> str:
        iteratee, target, iterable = self._loop_header(args)
        return (
            f"<?py __loopdata = __rt.push_loop({iteratee})\n"
            f"for {target} in {iterable}:\n"
            "loop = __rt.advance_loop() ?>"
        )

    def _compile_endforeach(self, args: str | None) -> str:
        return "<?py end\nloop = __rt.pop_loop() ?>"

    def _compile_forelse(self, args: str | None) -> str:
        iteratee, target, iterable = self._loop_header(args)
        n = self._next_id()
        self._forelse_stack.append([n, 0])
        return (
            f"<?py __empty_{n} = True\n"
            f"__loopdata = __rt.push_loop({iteratee})\n"
            f"for {target} in {iterable}:\n"
            f"__empty_{n} = False\n"
            "loop = __rt.advance_loop() ?>"
        )

    def _compile_empty(self, args: str | None) -> str:
        """`@empty` inside `@forelse`, or `@empty($x)` as a standalone check."""
        if args is not None and args.strip():
            return f"<?py if not ({args.strip()}): ?>"
        if not self._forelse_stack:
            self._fail("Empty without a forelse or an expression")
        state = self._forelse_stack[-1]
        state[1] = 1
        return f"<?py end\nloop = __rt.pop_loop()\nif __empty_{state[0]}: ?>"

    def _compile_endforelse(self, args: str | None) -> str:
        if not self._forelse_stack:
            self._fail("Endforelse without a forelse")
        _, seen_empty = self._forelse_stack.pop()
        if seen_empty:
            return "<?py end ?>"
        return "<?py end\nloop = __rt.pop_loop() ?>"

    def _loop_jump(self, keyword: str, args: str | None) -> str:
        if args is None or not args.strip():
            return f"<?py {keyword} ?>"
        if _LEVEL.match(args):
            if int(args) > 1:
                self._fail(f"Multi-level {keyword} is not supported")
            return f"<?py {keyword} ?>"
        return f"<?py if ({args.strip()}): {keyword} ?>"

    def _compile_break(self, args: str | None) -> str:
        return self._loop_jump("break", args)

    def _compile_continue(self, args: str | None) -> str:
        return self._loop_jump("continue", args)
