"""Directive compilation for the Quill compiler.

Provides mixins that turn built-in `@directives` into island-marked text.

The statements package is organized into logical modules:
- basic: Output helpers and inline code (json, method, set, unset, php, exit)
- control_flow: Conditionals, loops and switches
- template_structure: Layout inheritance and includes

Every handler takes the text between the directive's outer parentheses (or
None when the directive is bare) and returns replacement text.

Uses inline TYPE_CHECKING declarations for host attributes.

"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from quill.compiler.statements.basic import BasicStatementMixin
from quill.compiler.statements.control_flow import ControlFlowMixin
from quill.compiler.statements.template_structure import TemplateStructureMixin


class StatementCompilationMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    TemplateStructureMixin,
):
    """Combined mixin for compiling all built-in directives.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks in each individual mixin.

    """


# Closed dispatch table: directive name → unbound handler
BUILTIN_DIRECTIVES: dict[str, Callable[[Any, str | None], str]] = {
    # Conditionals
    "if": ControlFlowMixin._compile_if,
    "elseif": ControlFlowMixin._compile_elseif,
    "else": ControlFlowMixin._compile_else,
    "endif": ControlFlowMixin._compile_end,
    "unless": ControlFlowMixin._compile_unless,
    "endunless": ControlFlowMixin._compile_end,
    "isset": ControlFlowMixin._compile_isset,
    "endisset": ControlFlowMixin._compile_end,
    # Switch
    "switch": ControlFlowMixin._compile_switch,
    "case": ControlFlowMixin._compile_case,
    "default": ControlFlowMixin._compile_default,
    "endswitch": ControlFlowMixin._compile_endswitch,
    # Loops
    "for": ControlFlowMixin._compile_for,
    "endfor": ControlFlowMixin._compile_end,
    "foreach": ControlFlowMixin._compile_foreach,
    "endforeach": ControlFlowMixin._compile_endforeach,
    "forelse": ControlFlowMixin._compile_forelse,
    "empty": ControlFlowMixin._compile_empty,
    "endempty": ControlFlowMixin._compile_end,
    "endforelse": ControlFlowMixin._compile_endforelse,
    "while": ControlFlowMixin._compile_while,
    "endwhile": ControlFlowMixin._compile_end,
    "break": ControlFlowMixin._compile_break,
    "continue": ControlFlowMixin._compile_continue,
    # Layouts
    "extends": TemplateStructureMixin._compile_extends,
    "include": TemplateStructureMixin._compile_include,
    "yield": TemplateStructureMixin._compile_yield,
    "section": TemplateStructureMixin._compile_section,
    "endsection": TemplateStructureMixin._compile_endsection,
    "stop": TemplateStructureMixin._compile_endsection,
    "append": TemplateStructureMixin._compile_endsection,
    "overwrite": TemplateStructureMixin._compile_overwrite,
    "show": TemplateStructureMixin._compile_show,
    # Basic
    "json": BasicStatementMixin._compile_json,
    "unset": BasicStatementMixin._compile_unset,
    "set": BasicStatementMixin._compile_set,
    "php": BasicStatementMixin._compile_php,
    "endphp": BasicStatementMixin._compile_endphp,
    "method": BasicStatementMixin._compile_method,
    "exit": BasicStatementMixin._compile_exit,
}

__all__ = [
    "BUILTIN_DIRECTIVES",
    "BasicStatementMixin",
    "ControlFlowMixin",
    "StatementCompilationMixin",
    "TemplateStructureMixin",
]
