"""Compilation cache: compiled artifacts keyed by template name.

Compiling a template is far more expensive than executing it, so compiled
artifacts are kept in two tiers:

1. **In-process**: ready `Template` objects, checked without locking
2. **Artifact store**: persisted module source (filesystem or memory)

An artifact is valid while its recorded source mtime is not older than the
loader's current mtime. A stale or missing artifact is recompiled exactly
once per key even under concurrent renders (per-key `threading.Lock`).

Example:
    >>> env = Environment(loader=FileSystemLoader("views/"), cache_dir=".cache/views")
    >>> env.compile("pages.home").code.splitlines()[0]
    "__rt.write('<h1>')"
    >>> env.cache.stats()
    {'hits': 0, 'misses': 1, 'compiles': 1, 'store_failures': 0}

"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
import weakref
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from quill.environment.exceptions import CacheWriteError

if TYPE_CHECKING:
    from quill.environment import Environment
    from quill.environment.loaders import TemplateSource
    from quill.template.core import Template

logger = logging.getLogger(__name__)

_HEADER_PREFIX = "# quill-artifact "


@dataclass(frozen=True, slots=True)
class Artifact:
    """Compiled template: Python module source plus the source mtime it reflects.

    Attributes:
        name: Logical template name
        code: Python module source
        mtime: Modification time of the template source it was compiled from
    """

    name: str
    code: str
    mtime: float


def cache_key(name: str) -> str:
    """Storage key for a template name.

    Path separators become dots; the CRC32 of the unmodified name keeps
    ``a/b`` and ``a.b`` apart.

    Example:
            >>> cache_key("emails/welcome").startswith("emails.welcome__")
            True
            >>> cache_key("emails/welcome") == cache_key("emails.welcome")
            False
    """
    safe = name.replace("/", ".").replace("\\", ".")
    return f"{safe}__{zlib.crc32(name.encode('utf-8')) & 0xFFFFFFFF}"


class ArtifactStore(Protocol):
    def load(self, key: str) -> Artifact | None: ...

    def store(self, key: str, artifact: Artifact) -> None: ...

    def clear(self) -> bool: ...


class MemoryArtifactStore:
    """Dict-backed artifact store (tests, embedded use, no persistence)."""

    __slots__ = ("_artifacts",)

    def __init__(self) -> None:
        self._artifacts: dict[str, Artifact] = {}

    def load(self, key: str) -> Artifact | None:
        return self._artifacts.get(key)

    def store(self, key: str, artifact: Artifact) -> None:
        self._artifacts[key] = artifact

    def clear(self) -> bool:
        self._artifacts.clear()
        return True

    def __len__(self) -> int:
        return len(self._artifacts)


class FileSystemArtifactStore:
    """Persist artifacts as ``<directory>/<key><extension>``.

    The first line of each file is a header recording the template name and
    source mtime; the rest is the module source. Files are written to a
    temporary name and moved into place, so readers never see a partial
    artifact.

    Example:
            >>> store = FileSystemArtifactStore(".cache/views")
            >>> store.store("home__1", Artifact("home", "__rt.write('hi')\\n", 1700000000.5))
            >>> store.load("home__1").mtime
            1700000000.5

    """

    __slots__ = ("_directory", "_extension")

    def __init__(self, directory: str | Path, extension: str = ".py"):
        self._directory = Path(directory)
        self._extension = extension

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}{self._extension}"

    def load(self, key: str) -> Artifact | None:
        try:
            text = self._path(key).read_text("utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug("Cannot read artifact %s: %s", key, e)
            return None

        header, _, code = text.partition("\n")
        if not header.startswith(_HEADER_PREFIX):
            logger.debug("Ignoring artifact %s without header", key)
            return None
        try:
            meta = json.loads(header[len(_HEADER_PREFIX) :])
            return Artifact(name=meta["name"], code=code, mtime=float(meta["mtime"]))
        except (ValueError, KeyError, TypeError) as e:
            logger.debug("Ignoring artifact %s with malformed header: %s", key, e)
            return None

    def store(self, key: str, artifact: Artifact) -> None:
        """Write an artifact atomically.

        Raises:
            CacheWriteError: If the directory or file cannot be written
        """
        path = self._path(key)
        header = json.dumps({"name": artifact.name, "mtime": artifact.mtime})
        tmp = path.with_name(f"{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(f"{_HEADER_PREFIX}{header}\n{artifact.code}", "utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise CacheWriteError(
                f"Cannot write artifact for '{artifact.name}' to {path}: {e}"
            ) from e

    def clear(self) -> bool:
        """Remove every artifact file; returns False if any removal failed."""
        if not self._directory.is_dir():
            return True
        ok = True
        for path in self._directory.glob(f"*{self._extension}"):
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Cannot remove artifact %s: %s", path, e)
                ok = False
        return ok

    def stats(self) -> dict[str, int]:
        files: list[Path] = []
        if self._directory.is_dir():
            files = list(self._directory.glob(f"*{self._extension}"))
        return {
            "file_count": len(files),
            "total_bytes": sum(f.stat().st_size for f in files),
        }


class CompilationCache:
    """Two-tier cache of compiled templates for one Environment.

    Thread-Safety:
        Lookups of a valid in-process entry take no lock. Compilation of a
        key happens under that key's lock, re-checking after acquiring it,
        so concurrent callers compile a stale template exactly once.

    """

    __slots__ = ("_env_ref", "_guard", "_locks", "_stats", "_store", "_templates")

    def __init__(self, env: Environment, store: ArtifactStore):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._store = store
        self._templates: dict[str, Template] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "compiles": 0, "store_failures": 0}

    @property
    def store(self) -> ArtifactStore:
        return self._store

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _count(self, stat: str) -> None:
        with self._guard:
            self._stats[stat] += 1

    def get_or_compile(self, name: str) -> Template:
        """Return a current Template for `name`, compiling it if needed.

        Raises:
            TemplateNotFoundError: If the loader cannot resolve the name
        """
        env = self._env_ref()
        if env is None:
            raise RuntimeError("Environment has been garbage collected")
        source = env.get_source(name)
        key = cache_key(name)

        template = self._templates.get(key)
        if template is not None and template.mtime >= source.mtime:
            self._count("hits")
            return template

        with self._lock_for(key):
            template = self._templates.get(key)
            if template is not None and template.mtime >= source.mtime:
                self._count("hits")
                return template

            artifact = self._store.load(key)
            if artifact is not None and artifact.name == name and artifact.mtime >= source.mtime:
                self._count("hits")
                logger.debug("Loaded %s from artifact store", name)
                template = env.load_artifact(artifact)
                self._templates[key] = template
                return template

            self._count("misses")
            template = self._compile(env, source)
            try:
                self._store.store(key, template.artifact)
            except CacheWriteError as e:
                self._count("store_failures")
                logger.warning("Compiled %s without caching it: %s", name, e)
                return template
            self._templates[key] = template
            return template

    def _compile(self, env: Environment, source: TemplateSource) -> Template:
        logger.debug("Compiling %s (mtime %r)", source.name, source.mtime)
        code = env.compile_source(source.source, source.name)
        self._count("compiles")
        return env.load_artifact(Artifact(name=source.name, code=code, mtime=source.mtime))

    def clear(self) -> bool:
        """Drop in-process templates and clear the store."""
        self._templates.clear()
        return self._store.clear()

    def stats(self) -> dict[str, Any]:
        with self._guard:
            return dict(self._stats)
