"""Pure runtime helper functions injected into the template namespace.

These functions are called by compiled template code at render time.
None of them close over Environment state.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from quill.utils.html import Markup, html_escape

# Lookup failures that mean "not set" for @isset and `$x or 'default'`
_UNSET_ERRORS = (NameError, KeyError, IndexError, AttributeError, TypeError)

_JSON_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "'": "\\u0027",
    }
)
# An escape sequence inside a JSON string; `\"` becomes `\u0022`.
_JSON_STRING_ESCAPE = re.compile(r"\\(.)")


def isset(*thunks: Callable[[], Any]) -> bool:
    """True when every thunk evaluates without a lookup error and is not None.

    Example:
            >>> isset(lambda: {"a": 1}["a"])
            True
            >>> isset(lambda: {"a": None}["a"])
            False
            >>> isset(lambda: {}["missing"])
            False
    """
    for thunk in thunks:
        try:
            if thunk() is None:
                return False
        except _UNSET_ERRORS:
            return False
    return True


def pairs(data: Any) -> Iterable[tuple[Any, Any]]:
    """Key/value pairs for `@foreach($data as $key => $value)`.

    Mappings yield their items; any other iterable yields (index, item).
    """
    if isinstance(data, Mapping):
        return data.items()
    return enumerate(data)


def _hex_quote(match: re.Match[str]) -> str:
    return "\\u0022" if match.group(1) == '"' else match.group(0)


def to_json(value: Any, indent: int | None = None) -> Markup:
    """Encode a value as JSON that is safe inside `<script>` and single-quoted attributes.

    Double quotes inside string values are hex-escaped; the quotes that
    delimit strings are kept.

    Example:
            >>> str(to_json({"q": 'say "hi"'}))
            '{"q": "say \\\\u0022hi\\\\u0022"}'
    """
    encoded = _JSON_STRING_ESCAPE.sub(_hex_quote, json.dumps(value, indent=indent, default=str))
    return Markup(encoded.translate(_JSON_ESCAPES))


# =============================================================================
# Shared Base Namespace
# =============================================================================
# Static entries copied into every render namespace.
#
# Thread-Safety: This dict is read-only after module load.
# =============================================================================

STATIC_NAMESPACE: dict[str, Any] = {
    "__e": html_escape,
    "__isset": isset,
    "__pairs": pairs,
    "__json": to_json,
    "Markup": Markup,
}
