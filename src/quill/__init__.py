"""Quill: a directive-based HTML template engine compiled to Python.

Templates mix literal HTML with `@directives` and `{{ echo }}` expressions.
Each template compiles once to a Python module (the artifact), which is
cached by source modification time and executed on every render.

Quickstart:
    >>> from quill import Environment, DictLoader
    >>> env = Environment(loader=DictLoader({"hello": "Hello, {{ $name }}!"}))
    >>> env.render("hello", name="World")
    'Hello, World!'

File-based templates:
    >>> from quill import Environment, FileSystemLoader
    >>> env = Environment(
    ...     loader=FileSystemLoader("views/"),
    ...     cache_dir=".cache/views",
    ... )
    >>> env.render("pages.home", user=user)

Architecture:
Template Source → Rewrite Passes → Island-marked Text → Code Generator
→ Python Source (Artifact) → exec() per render

Pipeline stages:
1. **Rewriter**: Ordered lexical passes (directives, comments, echoes,
   extensions, raw code) that replace template syntax with code islands
2. **Code Generator**: Turns islands and literal text into an indented
   Python module writing through the runtime (``__rt``)
3. **Compilation Cache**: Persists artifacts, recompiling only stale ones
4. **Runtime**: Executes artifacts for one render; resolves `@extends`
   layouts, `@section` blocks, includes and loop metadata

Expressions:
Directive arguments and echoes are Python expressions. ``$name`` is
accepted as ``name`` and ``->`` as attribute access, so
``{{ $user->name }}`` reads ``user.name``.

"""

# environment first: it loads the compiler and cache modules in dependency order
from quill.environment import (  # noqa: I001
    CacheWriteError,
    ChoiceLoader,
    DictLoader,
    DirectiveError,
    DirectiveRegistry,
    EmptyBlockStackError,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FunctionLoader,
    InvalidDirectiveNameError,
    Loader,
    RenderExit,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSource,
    TemplateSyntaxError,
    UnbalancedBlockError,
)
from quill.artifact_cache import (
    Artifact,
    CompilationCache,
    FileSystemArtifactStore,
    MemoryArtifactStore,
    cache_key,
)
from quill.render_context import RenderContext, get_render_context, render_context
from quill.template import LoopContext, Template
from quill.utils.html import Markup, html_escape

__version__ = "0.1.0"

__all__ = [
    "Artifact",
    "CacheWriteError",
    "ChoiceLoader",
    "CompilationCache",
    "DictLoader",
    "DirectiveError",
    "DirectiveRegistry",
    "EmptyBlockStackError",
    "Environment",
    "ErrorCode",
    "FileSystemArtifactStore",
    "FileSystemLoader",
    "FunctionLoader",
    "InvalidDirectiveNameError",
    "Loader",
    "LoopContext",
    "Markup",
    "MemoryArtifactStore",
    "RenderContext",
    "RenderExit",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSource",
    "TemplateSyntaxError",
    "UnbalancedBlockError",
    "__version__",
    "cache_key",
    "get_render_context",
    "html_escape",
    "render_context",
]
