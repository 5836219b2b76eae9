"""Quill Template: a compiled artifact ready to execute.

Architecture:
    ```
    Template
    ├── artifact: Artifact           # Python module source + source mtime
    ├── _code: CodeType              # compile(artifact.code)
    └── _env_ref: WeakRef[Environment]

    execute(runtime)
    └── exec(_code, runtime.namespace)
    ```

The module writes through ``__rt`` as a side effect of running; it has no
render function of its own. A Template is immutable and safe to share
across threads; all render state lives in the Runtime.

Uses ``weakref.ref(env)`` to break the Template <-> Environment cycle
(the environment's cache holds templates).

"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any

from quill.environment.exceptions import (
    RenderExit,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)

if TYPE_CHECKING:
    from types import CodeType

    from quill.artifact_cache import Artifact
    from quill.environment import Environment
    from quill.template.runtime import Runtime


class Template:
    """Compiled template bound to its Environment.

    Obtain one from `Environment.get_template()` or `Environment.from_string()`
    rather than constructing it directly.

    Example:
            >>> template = env.get_template("pages.home")
            >>> template.render(user=user)
            '<h1>Welcome, Ada</h1>'

    """

    __slots__ = ("_code", "_env_ref", "artifact")

    def __init__(self, env: Environment, artifact: Artifact):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self.artifact = artifact
        try:
            self._code: CodeType = compile(artifact.code, f"<quill:{artifact.name}>", "exec")
        except SyntaxError as e:
            detail = f": {e.text.strip()}" if e.text else ""
            raise TemplateSyntaxError(
                f"Compiled template is not valid Python ({e.msg}){detail}",
                name=artifact.name,
            ) from e

    @property
    def _env(self) -> Environment:
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (template: {self.name})"
            )
        return env

    @property
    def name(self) -> str:
        return self.artifact.name

    @property
    def mtime(self) -> float:
        """Source modification time the artifact was compiled from."""
        return self.artifact.mtime

    def execute(self, runtime: Runtime) -> None:
        """Run the compiled module against the runtime's shared namespace.

        Exceptions other than template errors are wrapped in
        TemplateRuntimeError with the original chained as ``__cause__``.
        """
        try:
            exec(self._code, runtime.namespace)
        except (TemplateError, RenderExit):
            raise
        except Exception as e:
            raise TemplateRuntimeError(
                f"{type(e).__name__}: {e}",
                template_name=self.name,
                template_stack=runtime.render_ctx.template_stack,
            ) from e

    def render(self, context: dict[str, Any] | None = None, **kwargs: Any) -> str:
        """Render this template (and any layout it extends).

        Example:
            >>> t.render(name="World")
            'Hello, World!'
            >>> t.render({"name": "World"})
            'Hello, World!'
        """
        return self._env.render_template(self, context, **kwargs)

    def __repr__(self) -> str:
        return f"<Template {self.name!r}>"
