"""Default global functions available in every template.

Frameworks pass request state into templates through RenderContext
metadata rather than the template namespace:

    from quill.render_context import render_context

    with render_context() as ctx:
        ctx.set_meta("csrf_token", session.csrf_token())
        html = env.render("forms.login", form=form)

Templates then read it back:

    <form method="POST">
        {{ csrf_token() }}
        @method('PUT')
    </form>
"""

from __future__ import annotations

import warnings
from typing import Any

from quill.render_context import get_render_context
from quill.utils.html import Markup, html_escape


def meta(key: str, default: Any = None) -> Any:
    """Read framework metadata set on the current RenderContext."""
    ctx = get_render_context()
    if ctx is None:
        return default
    return ctx.get_meta(key, default)


def csrf_token() -> Markup:
    """Hidden input carrying the CSRF token set via `set_meta("csrf_token", ...)`.

    Renders as:
        <input type="hidden" name="_token" value="TOKEN_VALUE">

    Warns:
        UserWarning: If no token was set for this render
    """
    token = meta("csrf_token", "")
    if not token:
        warnings.warn(
            "csrf_token() called but no token provided. "
            "Call render_context.set_meta('csrf_token', token) before rendering.",
            UserWarning,
            stacklevel=2,
        )
    return Markup(f'<input type="hidden" name="_token" value="{html_escape(token)}">')


DEFAULT_GLOBALS: dict[str, Any] = {
    "csrf_token": csrf_token,
    "meta": meta,
}
