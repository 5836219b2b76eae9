"""Tests for the built-in directive dispatch table in the Quill compiler.

Verifies that every built-in directive resolves to a compiler handler and
that the table stays closed to user registrations.
"""

import pytest

from quill import Environment
from quill.compiler import BUILTIN_DIRECTIVES, Compiler
from quill.compiler.statements import StatementCompilationMixin


class TestDispatchTableStructure:
    """Verify dispatch table structure and completeness."""

    def test_handlers_are_mixin_methods(self):
        """All dispatch table values should be `_compile_*` mixin functions."""
        for name, handler in BUILTIN_DIRECTIVES.items():
            assert handler.__name__.startswith("_compile_"), name
            assert getattr(StatementCompilationMixin, handler.__name__) is handler

    def test_end_aliases_share_one_handler(self):
        end = BUILTIN_DIRECTIVES["endif"]
        for name in ("endunless", "endisset", "endfor", "endwhile", "endempty"):
            assert BUILTIN_DIRECTIVES[name] is end

    def test_section_terminators(self):
        end = BUILTIN_DIRECTIVES["endsection"]
        assert BUILTIN_DIRECTIVES["stop"] is end
        assert BUILTIN_DIRECTIVES["append"] is end

    def test_registry_knows_builtins(self):
        env = Environment()
        for name in BUILTIN_DIRECTIVES:
            assert env.directives.is_builtin(name)


class TestDispatchBehavior:
    """Every built-in keyword should still compile."""

    @pytest.mark.parametrize(
        "source",
        [
            "@if(True) x @endif",
            "@if(False) x @elseif(True) y @else z @endif",
            "@unless(False) x @endunless",
            "@isset($a) x @endisset",
            "@for(i in range(2)) x @endfor",
            "@foreach([1] as $i) x @endforeach",
            "@forelse([] as $i) x @empty y @endforelse",
            "@while(False) x @endwhile",
            "@switch(1) @case(1) x @break @default y @endswitch",
            "@section('a') x @endsection",
            "@section('a') x @stop",
            "@section('a') x @append",
            "@section('a') x @overwrite",
            "@section('a') x @show",
            "@json([1])",
            "@set('a', 1) @unset($a)",
            "@php x = 1 @endphp",
            "@method('PUT')",
            "@exit",
        ],
    )
    def test_compiles(self, source):
        code = Compiler(Environment()).compile(source, "t")
        compile(code, "<t>", "exec")

    def test_rewrite_is_deterministic(self):
        env = Environment()
        source = "@foreach($items as $item){{ $item }}@endforeach"
        assert Compiler(env).rewrite(source) == Compiler(env).rewrite(source)
