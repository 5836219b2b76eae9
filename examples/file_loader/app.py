"""File-based templates -- the most common real-world pattern.

Loads templates from disk with FileSystemLoader, demonstrates layout
inheritance (@extends / @section / @yield) and includes. Dotted names map
to nested paths: ``partials.nav`` is ``templates/partials/nav.html``.

Run:
    python app.py
"""

from pathlib import Path

from quill import Environment, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"
env = Environment(loader=FileSystemLoader(templates_dir))

nav_items = [
    {"url": "/", "label": "Home"},
    {"url": "/about", "label": "About"},
]

home_output = env.render(
    "home",
    site_name="My Site",
    nav_items=nav_items,
    title="Welcome",
    message="This is a quill-powered site with layout inheritance.",
)

about_output = env.render(
    "about",
    site_name="My Site",
    nav_items=nav_items,
    title="About Us",
    description="Built with quill, templates compiled to cached Python.",
    contact="team@example.com",
)


def main() -> None:
    print("=== Home Page ===")
    print(home_output)
    print()
    print("=== About Page ===")
    print(about_output)


if __name__ == "__main__":
    main()
