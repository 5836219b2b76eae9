"""Loop iteration metadata for ``@foreach`` and ``@forelse`` loops."""

from __future__ import annotations

from collections.abc import Sized
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class LoopContext:
    """Read-only snapshot of the innermost loop, exposed as `loop`.

    Properties:
        index: 0-based iteration count (0, 1, 2, ...)
        iteration: 1-based iteration count (1, 2, 3, ...)
        remaining: Iterations left after this one (None for unsized input)
        count: Total number of items (None for unsized input)
        first: True on the first iteration
        last: True on the final iteration (None for unsized input)
        depth: Nesting level, 1 for the outermost loop
        parent: Snapshot of the enclosing loop, or None

    Example:
            ```
            <ul>
            @foreach($items as $item)
                <li class="{{ $loop->cycle('odd', 'even') }}">
                    {{ $loop->iteration }}/{{ $loop->count }}: {{ $item }}
                    @if($loop->last) ← Last @endif
                </li>
            @endforeach
            </ul>
            ```

    """

    index: int
    iteration: int
    remaining: int | None
    count: int | None
    first: bool
    last: bool | None
    depth: int
    parent: LoopContext | None = None

    @property
    def even(self) -> bool:
        return self.iteration % 2 == 0

    @property
    def odd(self) -> bool:
        return self.iteration % 2 == 1

    def cycle(self, *values: Any) -> Any:
        """Cycle through the given values.

        Example:
            {{ $loop->cycle('odd', 'even') }}
        """
        if not values:
            return None
        return values[self.index % len(values)]

    def __repr__(self) -> str:
        total = "?" if self.count is None else self.count
        return f"<LoopContext {self.iteration}/{total} depth={self.depth}>"


class _LoopFrame:
    """Mutable per-loop counters owned by a LoopStack."""

    __slots__ = ("count", "first", "iteration", "last", "parent", "remaining")

    def __init__(self, count: int | None, parent: LoopContext | None):
        self.iteration = 0
        self.count = count
        self.remaining = count
        self.first = True
        self.last = None if count is None else count == 1
        self.parent = parent


class LoopStack:
    """Stack of active loops for one render.

    `push()` on loop entry, `advance()` at the top of every iteration,
    `pop()` on loop exit. The `parent` of a pushed loop is a snapshot of the
    enclosing loop taken at push time; it never refers to the enclosing frame.

    Example:
            >>> loops = LoopStack()
            >>> loops.push(["a", "b", "c"])
            >>> [(c.index, c.first, c.last, c.remaining)
            ...  for c in (loops.advance() for _ in range(3))]
            [(0, True, False, 2), (1, False, False, 1), (2, False, True, 0)]

    """

    __slots__ = ("_frames",)

    def __init__(self) -> None:
        self._frames: list[_LoopFrame] = []

    def push(self, collection: Any) -> None:
        """Start tracking a loop over `collection`.

        Only sized collections report `count`, `remaining` and `last`;
        generators and other unsized iterables leave them as None.
        """
        count = len(collection) if isinstance(collection, Sized) else None
        self._frames.append(_LoopFrame(count, self.top()))

    def advance(self) -> LoopContext:
        """Move the innermost loop to its next iteration."""
        frame = self._frames[-1]
        frame.iteration += 1
        frame.first = frame.iteration == 1
        if frame.count is not None:
            frame.remaining -= 1
            frame.last = frame.iteration == frame.count
        return self._snapshot(len(self._frames))

    def top(self) -> LoopContext | None:
        """Snapshot of the innermost loop, or None outside any loop."""
        if not self._frames:
            return None
        return self._snapshot(len(self._frames))

    def pop(self) -> LoopContext | None:
        """Stop tracking the innermost loop; return the enclosing loop's snapshot."""
        self._frames.pop()
        return self.top()

    def _snapshot(self, depth: int) -> LoopContext:
        frame = self._frames[depth - 1]
        return LoopContext(
            index=max(frame.iteration - 1, 0),
            iteration=frame.iteration,
            remaining=frame.remaining,
            count=frame.count,
            first=frame.first,
            last=frame.last,
            depth=depth,
            parent=frame.parent,
        )

    def __len__(self) -> int:
        return len(self._frames)
