"""Quill compiler: template source to Python module source.

Public API:
    Compiler: Runs the rewrite passes and code generation for one template
    CodeGenerator: Island-marked text to indented Python source
    BUILTIN_DIRECTIVES: Closed table of built-in directive handlers

"""

from __future__ import annotations

from quill.compiler.codegen import CodeGenerator
from quill.compiler.core import Compiler
from quill.compiler.statements import BUILTIN_DIRECTIVES

__all__ = ["BUILTIN_DIRECTIVES", "CodeGenerator", "Compiler"]
