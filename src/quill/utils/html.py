"""HTML escaping for Quill echo output.

Single-pass escaping via `str.translate()` over the five characters that
matter in HTML text and quoted attributes: `&`, `"`, `'`, `<`, `>`.

Objects implementing the `__html__` protocol (including `Markup`) are trusted
and emitted unchanged, so already-safe fragments are never double-escaped.

"""

from __future__ import annotations

from typing import Any

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        '"': "&quot;",
        "'": "&#039;",
        "<": "&lt;",
        ">": "&gt;",
    }
)


class Markup(str):
    """A string that is safe to emit without escaping.

    Example:
            >>> html_escape(Markup("<b>bold</b>"))
            '<b>bold</b>'
            >>> html_escape("<b>bold</b>")
            '&lt;b&gt;bold&lt;/b&gt;'

    """

    __slots__ = ()

    def __html__(self) -> str:
        return self

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def html_escape(value: Any) -> str:
    """Escape a value for HTML output.

    `None` renders as the empty string, matching raw echo output.
    """
    if value is None:
        return ""
    if hasattr(value, "__html__"):
        return str(value.__html__())
    if not isinstance(value, str):
        value = str(value)
    return value.translate(_ESCAPE_TABLE)
