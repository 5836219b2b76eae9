"""Named output blocks for one render.

A `BlockStack` holds the content of finished sections (plus the special
``content`` block the driver uses for each template's body) and a stack of
open blocks whose output is still being captured.

Blocks are filled child-first: a child template runs before its layout, so
by the time the layout reaches `@yield('title')` the child's section is
already stored. Ending a block without overwrite *appends* to any stored
content; `@overwrite` replaces it.

"""

from __future__ import annotations

from quill.environment.exceptions import EmptyBlockStackError


class _OpenBlock:
    __slots__ = ("name", "parts")

    def __init__(self, name: str):
        self.name = name
        self.parts: list[str] = []


class BlockStack:
    """Stored blocks plus a stack of blocks currently capturing output.

    Example:
            >>> blocks = BlockStack()
            >>> blocks.begin("title")
            >>> blocks.write("Home")
            >>> blocks.end()
            'title'
            >>> blocks.get("title")
            'Home'

    """

    __slots__ = ("_blocks", "_open")

    def __init__(self) -> None:
        self._blocks: dict[str, str] = {}
        self._open: list[_OpenBlock] = []

    @property
    def depth(self) -> int:
        """Number of blocks currently open."""
        return len(self._open)

    def begin(self, name: str) -> None:
        self._open.append(_OpenBlock(name))

    def write(self, text: str) -> None:
        if not self._open:
            raise EmptyBlockStackError("Cannot write output: no block is open")
        self._open[-1].parts.append(text)

    def end(self, overwrite: bool = False) -> str:
        """Close the innermost block and store its content; returns its name."""
        if not self._open:
            raise EmptyBlockStackError()
        block = self._open.pop()
        text = "".join(block.parts)
        if overwrite:
            self._blocks[block.name] = text
        else:
            self.store(block.name, text)
        return block.name

    def store(self, name: str, text: str) -> None:
        """Append `text` to the stored content of `name`."""
        self._blocks[name] = self._blocks.get(name, "") + text

    def get(self, name: str, default: str = "") -> str:
        return self._blocks.get(name, default)

    def flush(self) -> str:
        """Discard every open block and return their combined output, outermost first."""
        text = "".join("".join(block.parts) for block in self._open)
        self._open.clear()
        return text

    def __contains__(self, name: object) -> bool:
        return name in self._blocks
