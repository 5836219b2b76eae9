"""Hello World -- the simplest quill example.

Compile a template from a string and render it with context variables.
No templates directory needed.

Run:
    python app.py
"""

from quill import Environment

env = Environment()

# Compile from string
template = env.from_string("Hello, {{ $name }}!")

# Render with context
output = template.render(name="World")

# Echoes escape HTML; {!! !!} prints as is
escaped = template.render(name="<b>World</b>")
raw = env.from_string("Hello, {!! $name !!}!").render(name="<b>World</b>")


def main() -> None:
    print(output)
    print(escaped)
    print(raw)
    print()

    # Multiple renders with different context
    for name in ["Quill", "Python"]:
        print(template.render(name=name))


if __name__ == "__main__":
    main()
