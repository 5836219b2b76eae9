"""Quill RenderContext: per-render state isolated from user context.

Include depth, the include chain for error traces and framework metadata
live in a ContextVar instead of the template namespace, so user variables
can never collide with them.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field


@dataclass
class RenderContext:
    """Per-render state isolated from user context.

    Thread Safety:
        ContextVars are thread-local by design. Each thread has its own
        RenderContext instance.

    Attributes:
        template_name: Template currently executing (for error messages)
        include_depth: Current include depth (DoS protection)
        max_include_depth: Maximum allowed include depth
        template_stack: Include chain for error traces, outermost first
    """

    template_name: str | None = None

    # 50 is deep enough for any real template hierarchy while catching
    # infinite recursion from circular includes early.
    include_depth: int = 0
    max_include_depth: int = 50

    template_stack: list[str] = field(default_factory=list)

    # Framework metadata (CSRF tokens, request flags, ...)
    _meta: dict[str, object] = field(default_factory=dict)

    def get_meta(self, key: str, default: object = None) -> object:
        """Get framework-specific metadata.

        Example:
            with render_context() as ctx:
                ctx.set_meta("csrf_token", session.csrf_token())
                html = env.render("forms.login")
        """
        return self._meta.get(key, default)

    def set_meta(self, key: str, value: object) -> None:
        self._meta[key] = value

    def check_include_depth(self, template_name: str) -> None:
        """Raise TemplateRuntimeError if including `template_name` exceeds the limit."""
        if self.include_depth >= self.max_include_depth:
            from quill.environment.exceptions import ErrorCode, TemplateRuntimeError

            raise TemplateRuntimeError(
                f"Maximum include depth exceeded ({self.max_include_depth}) "
                f"when including '{template_name}'",
                template_name=self.template_name,
                template_stack=self.template_stack,
                suggestion="Check for circular includes: A → B → A",
                code=ErrorCode.INCLUDE_DEPTH,
            )

    def child_context(self, template_name: str) -> RenderContext:
        """Create child context for an include with incremented depth.

        Shares `_meta` with the parent and appends the current template to
        the stack.
        """
        new_stack = self.template_stack.copy()
        if self.template_name:
            new_stack.append(self.template_name)

        return RenderContext(
            template_name=template_name,
            include_depth=self.include_depth + 1,
            max_include_depth=self.max_include_depth,
            template_stack=new_stack,
            _meta=self._meta,
        )


# Module-level ContextVar
_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


@contextmanager
def render_context(
    template_name: str | None = None,
    max_include_depth: int = 50,
    parent_meta: dict[str, object] | None = None,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext and sets it as the current context for
    the duration of the with block, restoring the previous one on exit.

    Example:
        # Framework integration (inherit metadata):
        with render_context() as ctx:
            ctx.set_meta("csrf_token", token)
            # env.render() inherits this metadata
            html = env.render("forms.login")
    """
    ctx = RenderContext(
        template_name=template_name,
        max_include_depth=max_include_depth,
        _meta=parent_meta.copy() if parent_meta else {},
    )
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)


def set_render_context(ctx: RenderContext) -> Token[RenderContext | None]:
    """Set a RenderContext and return the reset token.

    Low-level function for nested includes that restore the context
    manually.
    """
    return _render_context.set(ctx)


def reset_render_context(token: Token[RenderContext | None]) -> None:
    _render_context.reset(token)
