"""Quill environment: configuration, loaders, directive registry and errors.

Public API:
    Environment: Central configuration and render entry point
    FileSystemLoader, DictLoader, ChoiceLoader, FunctionLoader: Loaders
    DirectiveRegistry: Custom directive handlers
    Exceptions: TemplateError and subclasses

"""

from __future__ import annotations

from quill.environment.exceptions import (
    CacheWriteError,
    DirectiveError,
    EmptyBlockStackError,
    ErrorCode,
    InvalidDirectiveNameError,
    RenderExit,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UnbalancedBlockError,
)
from quill.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    Loader,
    TemplateSource,
)
from quill.environment.registry import DirectiveRegistry, is_valid_directive_name
from quill.environment.core import Environment  # noqa: I001

__all__ = [
    "CacheWriteError",
    "ChoiceLoader",
    "DictLoader",
    "DirectiveError",
    "DirectiveRegistry",
    "EmptyBlockStackError",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "InvalidDirectiveNameError",
    "Loader",
    "RenderExit",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSource",
    "TemplateSyntaxError",
    "UnbalancedBlockError",
    "is_valid_directive_name",
]
