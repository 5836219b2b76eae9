"""Template structure directive compilation for the Quill compiler.

Provides mixin for layout inheritance (extends, section, yield) and
includes. All of them delegate to the per-render Runtime (``__rt``); the
compiled code only records intent.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


class TemplateStructureMixin:
    """Mixin for compiling template structure directives.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    if TYPE_CHECKING:
        # From Compiler core
        def _require(self, args: str | None) -> str: ...

    def _compile_extends(self, args: str | None) -> str:
        return f"<?py __rt.extends({self._require(args)}) ?>"

    def _compile_include(self, args: str | None) -> str:
        return f"<?py __rt.include({self._require(args)}) ?>"

    def _compile_yield(self, args: str | None) -> str:
        return f"<?py __rt.write(__rt.block({self._require(args)})) ?>"

    def _compile_section(self, args: str | None) -> str:
        """`@section('name')` opens a block; `@section('name', value)` stores one."""
        return f"<?py __rt.section({self._require(args)}) ?>"

    def _compile_endsection(self, args: str | None) -> str:
        return "<?py __rt.end_block() ?>"

    def _compile_overwrite(self, args: str | None) -> str:
        return "<?py __rt.end_block(overwrite=True) ?>"

    def _compile_show(self, args: str | None) -> str:
        return "<?py __rt.write(__rt.block(__rt.end_block())) ?>"
