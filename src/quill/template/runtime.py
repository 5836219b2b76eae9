"""Per-render runtime bound to compiled templates as ``__rt``.

One Runtime serves a whole render: the requested template, every layout it
extends and every template it includes execute against the same namespace,
so variables assigned in one are visible to the templates that run after it.

Render Flow:
    1. The driver queues the requested template.
    2. Each queued template runs with its output captured in ``content``.
    3. `@extends` queues the layout; it runs next and reads the child's
       sections through `@yield`.
    4. When the queue drains, ``content`` holds the final document.

"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Any, NoReturn

from quill.environment.exceptions import RenderExit, TemplateRuntimeError
from quill.render_context import (
    RenderContext,
    reset_render_context,
    set_render_context,
)
from quill.template.blocks import BlockStack
from quill.template.helpers import STATIC_NAMESPACE
from quill.template.loop_context import LoopContext, LoopStack
from quill.utils.html import html_escape

if TYPE_CHECKING:
    from collections.abc import Mapping

    from quill.environment import Environment
    from quill.template.core import Template

logger = logging.getLogger(__name__)

_MISSING = object()


class Runtime:
    """Render-local state: output blocks, loops, the layout queue and namespace.

    Attributes:
        namespace: Globals dict every template of this render executes in
        blocks: Captured output and stored sections
        loops: Active `@foreach` / `@forelse` loops
        queue: Templates still to run (requested template, then layouts)
        render_ctx: RenderContext of the template currently executing
    """

    __slots__ = ("_env", "_templates", "blocks", "loops", "namespace", "queue", "render_ctx")

    def __init__(
        self,
        env: Environment,
        context: Mapping[str, Any],
        render_ctx: RenderContext,
        templates: dict[str, Template] | None = None,
    ):
        self._env = env
        self._templates: dict[str, Template] = templates or {}
        self.blocks = BlockStack()
        self.loops = LoopStack()
        self.queue: deque[str] = deque()
        self.render_ctx = render_ctx
        self.namespace: dict[str, Any] = {
            **STATIC_NAMESPACE,
            **env.globals,
            **context,
            "__rt": self,
        }

    # ─────────────────────────────────────────────────────────────────────────
    # Driver
    # ─────────────────────────────────────────────────────────────────────────

    def run(self, name: str) -> str:
        """Run `name` and every layout it extends; return the final document."""
        self.queue.append(name)
        try:
            while self.queue:
                current = self.queue.popleft()
                template = self.load(current)
                self.render_ctx.template_name = current
                depth = self.blocks.depth
                self.blocks.begin("content")
                template.execute(self)
                if self.blocks.depth != depth + 1:
                    raise TemplateRuntimeError(
                        "Unbalanced sections (each @section needs one @endsection, "
                        "@stop, @show or @overwrite)",
                        template_name=current,
                        template_stack=self.render_ctx.template_stack,
                    )
                self.blocks.end(overwrite=True)
        except RenderExit:
            logger.debug("Render of %s stopped by @exit", name)
            return self.blocks.flush()
        return self.blocks.get("content")

    def load(self, name: str) -> Template:
        """Template for `name`, fetched from the cache at most once per render."""
        template = self._templates.get(name)
        if template is None:
            template = self._env.get_template(name)
            self._templates[name] = template
        return template

    # ─────────────────────────────────────────────────────────────────────────
    # Output and sections
    # ─────────────────────────────────────────────────────────────────────────

    def write(self, value: Any) -> None:
        if value is None:
            return
        self.blocks.write(value if isinstance(value, str) else str(value))

    def section(self, name: str, content: Any = _MISSING) -> None:
        """Open section `name`, or store `content` for it directly when given."""
        if content is _MISSING:
            self.blocks.begin(name)
        else:
            self.blocks.store(name, html_escape(content))

    def begin_block(self, name: str) -> None:
        self.blocks.begin(name)

    def end_block(self, overwrite: bool = False) -> str:
        return self.blocks.end(overwrite)

    def block(self, name: str, default: Any = "") -> str:
        return self.blocks.get(name, default)

    # ─────────────────────────────────────────────────────────────────────────
    # Composition
    # ─────────────────────────────────────────────────────────────────────────

    def extends(self, name: str) -> None:
        self.queue.append(name)

    def include(self, name: str, data: Mapping[str, Any] | None = None) -> None:
        """Run `name` now, writing into the current block.

        `data` is merged into the shared namespace before the include runs.
        """
        parent_ctx = self.render_ctx
        parent_ctx.check_include_depth(name)
        template = self.load(name)
        if data:
            self.namespace.update(data)

        self.render_ctx = parent_ctx.child_context(name)
        token = set_render_context(self.render_ctx)
        try:
            template.execute(self)
        finally:
            reset_render_context(token)
            self.render_ctx = parent_ctx

    # ─────────────────────────────────────────────────────────────────────────
    # Loops
    # ─────────────────────────────────────────────────────────────────────────

    def push_loop(self, collection: Any) -> Any:
        """Start tracking a loop; returns `collection` for the `for` statement."""
        self.loops.push(collection)
        return collection

    def advance_loop(self) -> LoopContext:
        return self.loops.advance()

    def pop_loop(self) -> LoopContext | None:
        return self.loops.pop()

    def exit(self) -> NoReturn:
        raise RenderExit()
