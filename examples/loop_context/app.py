"""Loop context -- $loop->first, $loop->last, $loop->iteration, $loop->count.

Demonstrates the `loop` variable inside @foreach / @forelse for styling
first/last items, row numbers and progress indicators, plus the @empty
branch of @forelse.

Run:
    python app.py
"""

from pathlib import Path

from quill import Environment, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"
env = Environment(loader=FileSystemLoader(templates_dir))
template = env.get_template("table")

items = ["Alpha", "Beta", "Gamma", "Delta"]
output = template.render(items=items)
empty_output = template.render(items=[])


def main() -> None:
    print(output)
    print(empty_output)


if __name__ == "__main__":
    main()
