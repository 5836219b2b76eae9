"""Directive registry for the Quill environment.

Holds user-registered directive handlers for one Environment. Built-in
directive names are known to the registry but always dispatch to the
compiler's own handlers; a user handler registered under a built-in name is
kept but never used.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator

from quill.environment.exceptions import InvalidDirectiveNameError

logger = logging.getLogger(__name__)

DirectiveHandler = Callable[[str], str]

_VALID_NAME = re.compile(r"\w+(?:->\w+)?", re.ASCII)


def is_valid_directive_name(name: str) -> bool:
    """True for `[A-Za-z0-9_]+` with an optional single `->member` suffix."""
    return _VALID_NAME.fullmatch(name) is not None


class DirectiveRegistry:
    """Dict-like registry of custom directive handlers.

    Supports:
        - registry.register('name', handler)
        - registry['name'] = handler
        - handler = registry.lookup('name')
        - 'name' in registry

    All mutations use copy-on-write, so a compilation running in another
    thread keeps a consistent view of the handlers.

    Example:
            >>> registry = DirectiveRegistry(builtin_names={"if", "endif"})
            >>> registry.register("upper", lambda args: f"<?py __rt.write(({args}).upper()) ?>")
            >>> registry.lookup("upper") is not None
            True
            >>> registry.register("bad name", str)
        InvalidDirectiveNameError: The directive name [bad name] is not valid...

    """

    __slots__ = ("_builtin_names", "_handlers")

    def __init__(self, builtin_names: Iterable[str] = ()):
        self._builtin_names = frozenset(builtin_names)
        self._handlers: dict[str, DirectiveHandler] = {}

    def register(self, name: str, handler: DirectiveHandler) -> None:
        """Register a handler, replacing any earlier handler for the same name.

        Raises:
            InvalidDirectiveNameError: If the name is not a valid directive name
        """
        if not is_valid_directive_name(name):
            raise InvalidDirectiveNameError(name)
        if name in self._builtin_names:
            logger.warning("Directive @%s is built in; the custom handler will not be used", name)
        new = self._handlers.copy()
        new[name] = handler
        self._handlers = new

    def lookup(self, name: str) -> DirectiveHandler | None:
        """Return the custom handler for `name`, or None for unknown and built-in names."""
        if name in self._builtin_names:
            return None
        return self._handlers.get(name)

    def is_builtin(self, name: str) -> bool:
        return name in self._builtin_names

    def __setitem__(self, name: str, handler: DirectiveHandler) -> None:
        self.register(name, handler)

    def __getitem__(self, name: str) -> DirectiveHandler:
        return self._handlers[name]

    def __contains__(self, name: object) -> bool:
        return name in self._builtin_names or name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def copy(self) -> dict[str, DirectiveHandler]:
        """Return a copy of the custom handlers."""
        return self._handlers.copy()
