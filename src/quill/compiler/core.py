"""Quill Compiler Core: main Compiler class.

The Compiler turns template source into Python module source in two stages:

1. **Rewrite**: ordered lexical passes replace template syntax with code
   islands (``<?py ... ?>``) embedded in the literal text.
2. **Generate**: `CodeGenerator` turns the island-marked text into an
   indented Python module that writes through the per-render ``__rt``.

Rewrite Passes (order is significant):
    1. statements: ``@directive`` / ``@directive(args)``
    2. comments: ``{{-- ... --}}``
    3. echos: ``{{{ }}}``, ``{!! !!}`` / ``{! !}``, ``{{ }}``
    4. extensions: user transforms, in registration order
    5. raw code: ``@php ... @endphp``

    ```python
    >>> env = Environment()
    >>> print(Compiler(env).rewrite("@if($ok)Hi {{ $name }}@endif"))
    <?py if ($ok): ?>Hi <?py __rt.write(__e($name)) ?><?py end ?>
    ```

Compilation is deterministic: the same source and configuration always
produce the same module text.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NoReturn

from quill.compiler.codegen import CodeGenerator
from quill.compiler.expressions import compile_echo_defaults
from quill.compiler.scanner import DirectiveToken, iter_directives
from quill.compiler.statements import BUILTIN_DIRECTIVES, StatementCompilationMixin
from quill.environment.exceptions import DirectiveError

if TYPE_CHECKING:
    from quill.environment import Environment


_COMMENT = re.compile(r"\{\{--(.*?)--\}\}", re.DOTALL)
_ESCAPED_ECHO = re.compile(r"\{\{\{\s*(.+?)\s*\}\}\}(\r?\n)?", re.DOTALL)
_RAW_ECHO = re.compile(r"\{(!!?)\s*(.+?)\s*\1\}(\r?\n)?", re.DOTALL)
_ECHO = re.compile(r"(@)?\{\{\s*(.+?)\s*\}\}(\r?\n)?", re.DOTALL)
_RAW_BLOCK = re.compile(r"(?<!@)@php(.*?)@endphp", re.DOTALL)


def _trailing(newline: str | None) -> str:
    # doubled: the code generator eats one newline after every island
    return newline * 2 if newline else ""


class Compiler(StatementCompilationMixin):
    """Compile template source to Python module source.

    A Compiler holds per-compilation state (open switches and forelse loops,
    the unique-name counter), so every compilation uses a fresh instance.

    Attributes:
        _env: Parent Environment (directive registry, extensions, echo format)
        _name: Template name for error messages
        _source: Template source for error snippets

    Directive Dispatch:
        Built-in names resolve through the closed `BUILTIN_DIRECTIVES` table;
        other names are looked up in the environment's DirectiveRegistry.
        Unknown names stay in the output verbatim.

    """

    __slots__ = (
        "_counter",
        "_env",
        "_forelse_stack",
        "_name",
        "_source",
        "_switch_stack",
        "_token",
    )

    def __init__(self, env: Environment):
        self._env = env
        self._name: str | None = None
        self._source = ""
        self._token: DirectiveToken | None = None
        self._counter = 0
        self._switch_stack: list[list[int]] = []
        self._forelse_stack: list[list[int]] = []

    def compile(self, source: str, name: str | None = None) -> str:
        """Compile template source to Python module source."""
        text = self.rewrite(source, name)
        return CodeGenerator(name).generate(text)

    def rewrite(self, source: str, name: str | None = None) -> str:
        """Run the lexical passes, returning island-marked text."""
        self._name = name
        self._source = source
        text = self.compile_statements(source)
        text = self.compile_comments(text)
        text = self.compile_echos(text)
        for transform in self._env.extensions:
            text = transform(text)
        return self.compile_raw_blocks(text)

    # ─────────────────────────────────────────────────────────────────────────
    # Passes
    # ─────────────────────────────────────────────────────────────────────────

    def compile_statements(self, text: str) -> str:
        out: list[str] = []
        pos = 0
        for token in iter_directives(text):
            out.append(text[pos : token.start])
            pos = token.end
            out.append(self._compile_token(text, token))
        out.append(text[pos:])
        return "".join(out)

    def _compile_token(self, text: str, token: DirectiveToken) -> str:
        if token.escaped:
            # @@php survives until the raw pass so it is not taken as a block
            if token.name == "php":
                return text[token.start : token.end]
            return text[token.start + 1 : token.end]

        builtin = BUILTIN_DIRECTIVES.get(token.name)
        custom = None if builtin is not None else self._env.directives.lookup(token.name)
        if builtin is None and custom is None:
            return text[token.start : token.end]

        self._token = token
        if token.unclosed:
            paren = text.find("(", token.end)
            line_end = text.find("\n", paren)
            tail = text[paren + 1 : line_end if line_end != -1 else len(text)]
            self._fail("Unmatched parentheses", arguments=tail)

        if builtin is not None:
            return builtin(self, token.arguments)
        assert custom is not None
        return custom((token.arguments or "").strip())

    def compile_comments(self, text: str) -> str:
        return _COMMENT.sub("<?py ?>", text)

    def compile_echos(self, text: str) -> str:
        text = _ESCAPED_ECHO.sub(self._escaped_echo, text)
        text = _RAW_ECHO.sub(self._raw_echo, text)
        return _ECHO.sub(self._regular_echo, text)

    def _escaped_echo(self, match: re.Match[str]) -> str:
        expression = compile_echo_defaults(match.group(1))
        return f"<?py __rt.write(__e({expression})) ?>{_trailing(match.group(2))}"

    def _raw_echo(self, match: re.Match[str]) -> str:
        expression = compile_echo_defaults(match.group(2))
        return f"<?py __rt.write({expression}) ?>{_trailing(match.group(3))}"

    def _regular_echo(self, match: re.Match[str]) -> str:
        if match.group(1):
            return match.group(0)[1:]
        expression = self._env.echo_format % compile_echo_defaults(match.group(2))
        return f"<?py __rt.write({expression}) ?>{_trailing(match.group(3))}"

    def compile_raw_blocks(self, text: str) -> str:
        text = _RAW_BLOCK.sub(r"<?py!\1?>", text)
        return text.replace("@@php", "@php")

    # ─────────────────────────────────────────────────────────────────────────
    # Handler support
    # ─────────────────────────────────────────────────────────────────────────

    def _next_id(self) -> int:
        self._counter += 1
        return self._counter

    def _require(self, args: str | None) -> str:
        if args is None or not args.strip():
            self._fail("Missing arguments")
        return args.strip()

    def _fail(self, message: str, arguments: str | None = None) -> NoReturn:
        token = self._token
        assert token is not None
        raise DirectiveError(
            token.name,
            (token.arguments or "") if arguments is None else arguments,
            message,
            lineno=self._source.count("\n", 0, token.start) + 1,
            name=self._name,
            source=self._source,
        )
