"""Quill Environment: configuration, compilation and the render entry point.

The Environment owns everything shared between renders: the loader, the
directive registry, extension transforms, globals and the compilation
cache. Renders themselves share nothing; each gets a fresh Runtime.

Thread-Safety:
    - `render()` and `get_template()` may be called from many threads
    - `directive()` and `extend()` use copy-on-write, but are meant for
      startup; templates already compiled are not recompiled when the
      directive set changes (call `clear_cache()`)

"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from quill.artifact_cache import (
    Artifact,
    ArtifactStore,
    CompilationCache,
    FileSystemArtifactStore,
    MemoryArtifactStore,
)
from quill.compiler import BUILTIN_DIRECTIVES, Compiler
from quill.environment.exceptions import TemplateNotFoundError
from quill.environment.globals import DEFAULT_GLOBALS
from quill.environment.loaders import Loader, TemplateSource
from quill.environment.registry import DirectiveHandler, DirectiveRegistry
from quill.render_context import get_render_context, render_context
from quill.template.core import Template
from quill.template.runtime import Runtime

logger = logging.getLogger(__name__)

Extension = Callable[[str], str]


@dataclass
class Environment:
    """Central configuration and entry point for Quill templates.

    Attributes:
        loader: Template source loader (None: only `from_string()` works)
        artifact_store: Where compiled artifacts persist; defaults to a
            FileSystemArtifactStore in `cache_dir`, or memory without one
        cache_dir: Directory for compiled artifacts
        echo_format: %-format wrapping every `{{ }}` expression
        globals: Variables available in every template
        max_include_depth: Maximum nesting of `@include`

    Example:
            >>> env = Environment(loader=DictLoader({"hello": "Hello, {{ $name }}!"}))
            >>> env.render("hello", name="<World>")
            'Hello, &lt;World&gt;!'

    Custom directives return replacement text, usually a code island:
            >>> env.directive("upper", lambda args: f"<?py __rt.write(({args}).upper()) ?>")
            >>> env.from_string("@upper('shout')").render()
            'SHOUT'

    """

    loader: Loader | None = None
    artifact_store: ArtifactStore | None = None
    cache_dir: str | Path | None = None
    echo_format: str = "__e(%s)"
    globals: dict[str, Any] = field(default_factory=dict)
    max_include_depth: int = 50

    directives: DirectiveRegistry = field(init=False, repr=False)
    extensions: list[Extension] = field(init=False, repr=False)
    cache: CompilationCache = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if "%s" not in self.echo_format:
            raise ValueError(f"echo_format must contain '%s', got {self.echo_format!r}")
        self.globals = {**DEFAULT_GLOBALS, **self.globals}
        self.directives = DirectiveRegistry(BUILTIN_DIRECTIVES)
        self.extensions = []
        if self.artifact_store is None:
            if self.cache_dir is not None:
                self.artifact_store = FileSystemArtifactStore(self.cache_dir)
            else:
                self.artifact_store = MemoryArtifactStore()
        self.cache = CompilationCache(self, self.artifact_store)

    # ─────────────────────────────────────────────────────────────────────────
    # Configuration
    # ─────────────────────────────────────────────────────────────────────────

    def directive(self, name: str, handler: DirectiveHandler) -> None:
        """Register a custom `@name` directive.

        The handler receives the trimmed text between the parentheses ("" for
        a bare directive) and returns replacement template text.

        Raises:
            InvalidDirectiveNameError: If the name is not a valid directive name
        """
        self.directives.register(name, handler)

    def extend(self, transform: Extension) -> None:
        """Add a text transform run after the built-in passes, before raw code."""
        self.extensions = [*self.extensions, transform]

    def add_global(self, name: str, value: Any) -> None:
        self.globals = {**self.globals, name: value}

    def clear_cache(self) -> bool:
        """Remove every compiled artifact; returns False if any removal failed."""
        logger.debug("Clearing compiled template cache")
        return self.cache.clear()

    # ─────────────────────────────────────────────────────────────────────────
    # Loading and compilation
    # ─────────────────────────────────────────────────────────────────────────

    def get_source(self, name: str) -> TemplateSource:
        if self.loader is None:
            raise TemplateNotFoundError(
                f"Template '{name}' not found: no loader configured"
            )
        return self.loader.get_source(name)

    def list_templates(self) -> list[str]:
        return self.loader.list_templates() if self.loader is not None else []

    def compile_source(self, source: str, name: str | None = None) -> str:
        """Compile template text to Python module source (no caching)."""
        return Compiler(self).compile(source, name)

    def load_artifact(self, artifact: Artifact) -> Template:
        return Template(self, artifact)

    def compile(self, name: str) -> Artifact:
        """Return the current artifact for `name`, compiling it if stale."""
        return self.cache.get_or_compile(name).artifact

    def get_template(self, name: str) -> Template:
        """Load a template by name, using the compilation cache.

        Raises:
            TemplateNotFoundError: If the loader cannot resolve the name
            TemplateSyntaxError: If the template fails to compile
        """
        return self.cache.get_or_compile(name)

    def from_string(self, source: str, name: str = "<string>") -> Template:
        """Compile a template from text; the result is not cached."""
        code = self.compile_source(source, name)
        return self.load_artifact(Artifact(name=name, code=code, mtime=0.0))

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def render(self, name: str, context: dict[str, Any] | None = None, **kwargs: Any) -> str:
        """Render the template `name` with `context` and keyword variables.

        Raises:
            TemplateNotFoundError: If a template cannot be loaded
            TemplateSyntaxError: If a template fails to compile
            TemplateRuntimeError: If executing a template raises
        """
        return self.render_template(self.get_template(name), context, **kwargs)

    def render_template(
        self,
        template: Template,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> str:
        variables = {**(context or {}), **kwargs}
        parent = get_render_context()
        with render_context(
            template_name=template.name,
            max_include_depth=self.max_include_depth,
            parent_meta=parent._meta if parent is not None else None,
        ) as ctx:
            runtime = Runtime(self, variables, ctx, templates={template.name: template})
            output = runtime.run(template.name)
        logger.debug("Rendered %s (%d chars)", template.name, len(output))
        return output
