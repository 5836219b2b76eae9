"""Custom directives and extensions -- extending quill's syntax.

Demonstrates `Environment.directive()` for new `@name(args)` directives and
`Environment.extend()` for whole-template text transforms. Directive
handlers receive the argument text and return replacement template text,
usually a ``<?py ... ?>`` code island.

Run:
    python app.py
"""

from quill import DictLoader, Environment


def money(amount: float, currency: str = "$") -> str:
    """Format amount as currency."""
    return f"{currency}{amount:,.2f}"


env = Environment(
    loader=DictLoader(
        {
            "invoice": """\
<h1>Invoice</h1>
@foreach($items as $item)
<p>{{ $item['name'] }} x{{ $item['qty'] }}: @money($item['price'] * $item['qty'])</p>
@endforeach
<p>Total: @money($total)</p>
@admin
<p>Margin: {{ $margin }}%</p>
@endadmin
<footer>[[year]]</footer>""",
        }
    ),
    globals={"money": money},
)

# @money(expr) -> escaped call to the money() global
env.directive("money", lambda args: f"<?py __rt.write(__e(money({args}))) ?>")

# Block directives open and close a code island
env.directive("admin", lambda args: "<?py if user.get('is_admin'): ?>")
env.directive("endadmin", lambda args: "<?py end ?>")

# Extensions see the rewritten text before raw @php blocks are resolved
env.extend(lambda text: text.replace("[[year]]", "2024"))

items = [
    {"name": "Widget A", "price": 19.99, "qty": 2},
    {"name": "Widget B", "price": 5.00, "qty": 1},
]
context = {"items": items, "total": 44.98, "margin": 35}

output = env.render("invoice", context, user={"is_admin": False})
admin_output = env.render("invoice", context, user={"is_admin": True})


def main() -> None:
    print(output)
    print()
    print(admin_output)


if __name__ == "__main__":
    main()
