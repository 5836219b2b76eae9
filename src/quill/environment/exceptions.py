"""Exceptions for the Quill template engine.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError       # Loader cannot resolve a template name
├── TemplateSyntaxError         # Generated code or block structure is invalid
│   ├── UnbalancedBlockError    # Block directives do not pair up
│   └── DirectiveError          # Built-in directive received malformed arguments
├── TemplateRuntimeError        # Exception raised while executing an artifact
├── EmptyBlockStackError        # Block ended (or written) with nothing open
└── CacheWriteError             # Artifact store could not persist an artifact

InvalidDirectiveNameError is both a TemplateError and a ValueError: it is
raised at registration time, before any template is involved.

Example:
    ```
    Q-CMP-001: Unmatched parentheses in @if directive
      --> pages.home:3
       |
    >  3 | @if($user->isAdmin(
       |
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from quill.environment import terminal


class ErrorCode(Enum):
    """Searchable error codes for Quill template errors.

    Format: Q-{CATEGORY}-{NUMBER}
    Categories: CMP (compilation), RUN (runtime), TPL (template loading),
    REG (registration), CCH (artifact cache)
    """

    # Compilation errors (Q-CMP-xxx)
    DIRECTIVE_ARGUMENTS = "Q-CMP-001"
    UNBALANCED_BLOCK = "Q-CMP-002"
    INVALID_CODE = "Q-CMP-003"

    # Runtime errors (Q-RUN-xxx)
    RUNTIME_ERROR = "Q-RUN-001"
    EMPTY_BLOCK_STACK = "Q-RUN-002"
    INCLUDE_DEPTH = "Q-RUN-003"

    # Template loading errors (Q-TPL-xxx)
    TEMPLATE_NOT_FOUND = "Q-TPL-001"

    # Registration errors (Q-REG-xxx)
    INVALID_DIRECTIVE_NAME = "Q-REG-001"

    # Artifact cache errors (Q-CCH-xxx)
    CACHE_WRITE = "Q-CCH-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'compile', 'runtime', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "CMP": "compile",
            "RUN": "runtime",
            "TPL": "template",
            "REG": "registration",
            "CCH": "cache",
        }.get(prefix, "unknown")


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(source: str, error_line: int, *, context_lines: int = 2) -> SourceSnippet:
    """Build a SourceSnippet showing `context_lines` around a 1-based line."""
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line)


def format_template_stack(stack: list[str] | None) -> str:
    """Format the include chain that led to an error.

    Example:
        >>> print(format_template_stack(["layout.main", "partials.nav"]))
        Template stack:
          • layout.main
          • partials.nav
    """
    if not stack:
        return ""
    lines = [terminal.dim_text("Template stack:")]
    for name in stack:
        lines.append(f"  • {terminal.location(name)}")
    return "\n".join(lines)


class TemplateError(Exception):
    """Base exception for all Quill template errors.

        >>> try:
        ...     env.render("pages.home", user=user)
        ... except TemplateError as e:
        ...     log.error(e.format_compact())

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format the error as a one-screen diagnostic without traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = terminal.format_error_header(self.code.value, header)
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by the configured loader.

    Example:
            >>> env.render("missing.page")
        TemplateNotFoundError: Template 'missing.page' not found in: views/

    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class InvalidDirectiveNameError(TemplateError, ValueError):
    """Directive name contains characters outside `[A-Za-z0-9_]` and `->`."""

    code: ErrorCode | None = ErrorCode.INVALID_DIRECTIVE_NAME

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"The directive name [{name}] is not valid. Directive names must only "
            f"contain alphanumeric characters and underscores, with an optional "
            f"'->member' suffix."
        )


class TemplateSyntaxError(TemplateError):
    """Compile-time error in a template.

    When ``source`` and ``lineno`` are provided, the message includes a
    snippet of the offending template line.
    """

    code: ErrorCode | None = ErrorCode.INVALID_CODE

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        super().__init__(self._format_message())

    def _location(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
        return location

    def _snippet(self) -> SourceSnippet | None:
        if self.source and self.lineno and 0 < self.lineno <= len(self.source.splitlines()):
            return build_source_snippet(self.source, self.lineno, context_lines=0)
        return None

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}\n  --> {self._location()}"
        snippet = self._snippet()
        if snippet is not None:
            return f"{header}\n{snippet.format()}"
        return header

    def format_compact(self) -> str:
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  --> {terminal.location(self._location())}",
        ]
        snippet = self._snippet()
        if snippet is not None:
            parts.append(snippet.format())
        return "\n".join(parts)


class UnbalancedBlockError(TemplateSyntaxError):
    """Opening and closing directives do not pair up (e.g. `@if` without `@endif`)."""

    code: ErrorCode | None = ErrorCode.UNBALANCED_BLOCK


class DirectiveError(TemplateSyntaxError):
    """A built-in directive received malformed arguments.

    Attributes:
        directive: Directive name without the leading `@`
        arguments: Raw argument text as written in the template
    """

    code: ErrorCode | None = ErrorCode.DIRECTIVE_ARGUMENTS

    def __init__(
        self,
        directive: str,
        arguments: str,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
    ):
        self.directive = directive
        self.arguments = arguments
        super().__init__(
            f"{message} in @{directive} directive (arguments: {arguments!r})",
            lineno=lineno,
            name=name,
            source=source,
        )


class TemplateRuntimeError(TemplateError):
    """Exception raised while executing a compiled template.

    The original exception is chained as ``__cause__``.

    Attributes:
        message: Error description
        template_name: Template that was executing
        template_stack: Include chain, outermost first
        suggestion: Optional fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        template_stack: list[str] | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ):
        if code is not None:
            self.code = code
        self.message = message
        self.template_name = template_name
        self.template_stack = template_stack or []
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]
        parts.append(f"  Location: {terminal.location(self.template_name or '<template>')}")
        if self.template_stack:
            parts.append(format_template_stack(self.template_stack))
        if self.suggestion:
            parts.append(f"  {terminal.hint('Suggestion:')} {self.suggestion}")
        return "\n".join(parts)


class EmptyBlockStackError(TemplateError):
    """A block was ended (or written to) while no block was open.

    Indicates a malformed template, e.g. `@endsection` without `@section`.
    """

    code: ErrorCode | None = ErrorCode.EMPTY_BLOCK_STACK

    def __init__(self, message: str = "Cannot end a block: no block is open"):
        super().__init__(message)


class CacheWriteError(TemplateError):
    """An artifact store failed to persist a compiled artifact."""

    code: ErrorCode | None = ErrorCode.CACHE_WRITE


class RenderExit(Exception):  # noqa: N818
    """Raised by `@exit` to stop the current render early.

    Not a TemplateError: the render driver catches it and returns the output
    captured so far.
    """
