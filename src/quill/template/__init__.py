"""Quill template runtime: compiled templates and per-render state.

Public API:
    Template: Compiled artifact bound to its Environment
    Runtime: Per-render state exposed to compiled code as ``__rt``
    BlockStack: Captured output and named sections
    LoopContext: Snapshot exposed as `loop` inside `@foreach`
    LoopStack: Stack of active loops

"""

from __future__ import annotations

from quill.template.blocks import BlockStack
from quill.template.core import Template
from quill.template.loop_context import LoopContext, LoopStack
from quill.template.runtime import Runtime

__all__ = ["BlockStack", "LoopContext", "LoopStack", "Runtime", "Template"]
