"""Template loaders for the Quill environment.

Loaders resolve a logical template name (a dotted path such as
`layout.main`) to a `TemplateSource`: the source text plus the modification
timestamp the compilation cache uses for staleness checks.

Built-in Loaders:
- `FileSystemLoader`: Load from filesystem directories
- `DictLoader`: Load from an in-memory dictionary (testing/embedded)
- `ChoiceLoader`: Try multiple loaders in order (theme fallback)
- `FunctionLoader`: Wrap a callable as a loader (quick one-offs)

Custom Loaders:
Implement the Loader protocol:
    ```python
    class DatabaseLoader:
        def get_source(self, name: str) -> TemplateSource:
            row = db.query("SELECT body, updated FROM views WHERE name = ?", name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return TemplateSource(name, row.body, row.updated.timestamp(), f"db://{name}")

        def list_templates(self) -> list[str]:
            return [r.name for r in db.query("SELECT name FROM views")]
    ```

Thread-Safety:
Loaders should be safe for concurrent `get_source()` calls. FileSystemLoader
reads files on each call; DictLoader replaces entries atomically.

"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from quill.environment.exceptions import TemplateNotFoundError


@dataclass(frozen=True, slots=True)
class TemplateSource:
    """Immutable template text with its last-modified timestamp.

    Attributes:
        name: Logical template name (e.g. ``layout.main``)
        source: Template text
        mtime: Modification time in seconds (compared against cached artifacts)
        filename: Origin for error messages, or None when not file-backed
    """

    name: str
    source: str
    mtime: float
    filename: str | None = None


class Loader(Protocol):
    def get_source(self, name: str) -> TemplateSource: ...

    def list_templates(self) -> list[str]: ...


def name_to_path(name: str, extension: str) -> str:
    """Map a dotted logical name to a relative file path.

    Example:
            >>> name_to_path("layout.main", ".html")
            'layout/main.html'
            >>> name_to_path("/emails/welcome", ".html")
            'emails/welcome.html'
    """
    return name.lstrip("/").replace(".", "/") + extension


class FileSystemLoader:
    """Load templates from filesystem directories.

    Dotted names map to nested paths with the configured extension appended,
    so ``layout.main`` resolves to ``<path>/layout/main.html``. Directories are
    searched in order and the first match wins.

    Example:
            >>> loader = FileSystemLoader(["themes/custom/", "themes/default/"])
            >>> src = loader.get_source("pages.about")
            >>> src.filename
            'themes/custom/pages/about.html'

    Raises:
        TemplateNotFoundError: If template not found in any search path

    """

    __slots__ = ("_encoding", "_extension", "_paths")

    def __init__(
        self,
        paths: str | Path | list[str | Path],
        extension: str = ".html",
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._extension = extension
        self._encoding = encoding

    @property
    def extension(self) -> str:
        return self._extension

    def get_source(self, name: str) -> TemplateSource:
        """Read template text and its mtime from the first matching directory."""
        relative = name_to_path(name, self._extension)
        for base in self._paths:
            path = base / relative
            if path.is_file():
                # stat before reading: a write racing with us leaves the
                # artifact older than the file, forcing a recompile next time
                mtime = path.stat().st_mtime
                return TemplateSource(
                    name=name,
                    source=path.read_text(self._encoding),
                    mtime=mtime,
                    filename=str(path),
                )

        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_templates(self) -> list[str]:
        """List dotted names of all templates in the search paths."""
        templates: set[str] = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob(f"*{self._extension}"):
                    relative = path.relative_to(base).as_posix()
                    templates.add(relative[: -len(self._extension)].replace("/", "."))
        return sorted(templates)


class DictLoader:
    """Load templates from an in-memory dictionary.

    Values are either source strings (mtime 0.0) or ``(source, mtime)``
    tuples. ``set()`` replaces a template and bumps its mtime, which makes
    the compilation cache recompile it on next use.

    Example:
            >>> loader = DictLoader({
            ...     "layout": "<html>@yield('content')</html>",
            ...     "page": "@extends('layout')Hi",
            ... })
            >>> env = Environment(loader=loader)
            >>> env.render("page")
            '<html>Hi</html>'

    Raises:
        TemplateNotFoundError: If template name not in mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: dict[str, str | tuple[str, float]] | None = None):
        self._mapping: dict[str, tuple[str, float]] = {}
        for name, value in (mapping or {}).items():
            self._mapping[name] = (value, 0.0) if isinstance(value, str) else value

    def set(self, name: str, source: str, mtime: float | None = None) -> None:
        """Add or replace a template; mtime defaults to the current time."""
        if mtime is None:
            previous = self._mapping.get(name, ("", 0.0))[1]
            mtime = max(time.time(), previous + 1.0)
        self._mapping[name] = (source, mtime)

    def get_source(self, name: str) -> TemplateSource:
        entry = self._mapping.get(name)
        if entry is None:
            from difflib import get_close_matches

            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg)
        source, mtime = entry
        return TemplateSource(name=name, source=source, mtime=mtime)

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Example:
            >>> loader = ChoiceLoader([
            ...     DictLoader({"nav": "<nav>Custom</nav>"}),
            ...     FileSystemLoader("views/"),
            ... ])

    Raises:
        TemplateNotFoundError: If no loader can find the template

    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: list[Loader]):
        self._loaders = loaders

    def get_source(self, name: str) -> TemplateSource:
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        templates: set[str] = set()
        for loader in self._loaders:
            templates.update(loader.list_templates())
        return sorted(templates)


class FunctionLoader:
    """Wrap a callable as a template loader.

    The function takes a template name and returns:
        - ``str``: template source (mtime 0.0, never stale once cached)
        - ``tuple[str, float]``: ``(source, mtime)``
        - ``TemplateSource``: used as is
        - ``None``: template not found

    Example:
            >>> def load(name):
            ...     if name == "greeting":
            ...         return "Hello, {{ $name }}!"
            ...     return None
            >>> Environment(loader=FunctionLoader(load)).render("greeting", name="World")
            'Hello, World!'

    """

    __slots__ = ("_load_func",)

    def __init__(
        self,
        load_func: Callable[[str], str | tuple[str, float] | TemplateSource | None],
    ):
        self._load_func = load_func

    def get_source(self, name: str) -> TemplateSource:
        result = self._load_func(name)

        if result is None:
            raise TemplateNotFoundError(f"Template '{name}' not found")
        if isinstance(result, TemplateSource):
            return result
        if isinstance(result, str):
            return TemplateSource(name=name, source=result, mtime=0.0, filename="<function>")
        source, mtime = result
        return TemplateSource(name=name, source=source, mtime=mtime, filename="<function>")

    def list_templates(self) -> list[str]:
        """FunctionLoader cannot enumerate templates."""
        return []
