"""Concurrent rendering -- one compiled template, 8 threads.

A compiled template is immutable; every render gets its own Runtime and
RenderContext (via ContextVar), so simultaneous renders never see each
other's variables, sections or loop state.

Run:
    python app.py
"""

from concurrent.futures import ThreadPoolExecutor

from quill import DictLoader, Environment

TEMPLATE_SOURCE = """\
@extends('base')
@section('title', $title)
<article id="page-{{ $page_id }}">
  <h1>{{ $title }}</h1>
  <ul>
  @foreach($tags as $tag)
    <li>{{ $loop->iteration }}. {{ $tag }}</li>
  @endforeach
  </ul>
</article>"""

env = Environment(
    loader=DictLoader(
        {
            "base": "<title>@yield('title')</title>\n@yield('content')",
            "page": TEMPLATE_SOURCE,
        }
    )
)

pages = [
    {"page_id": i, "title": f"Page {i}", "tags": [f"tag-{i}-a", f"tag-{i}-b", f"tag-{i}-c"]}
    for i in range(8)
]


def render_page(page: dict) -> str:
    """Render a single page -- called from a worker thread."""
    return env.render("page", **page)


with ThreadPoolExecutor(max_workers=8) as pool:
    results = list(pool.map(render_page, pages))

output = "\n".join(results)
stats = env.cache.stats()


def main() -> None:
    print(f"Rendered {len(results)} pages across 8 threads:\n")
    for i, html in enumerate(results):
        print(f"--- Thread {i} ---")
        print(html)
        print()
    print(f"Compilations: {stats['compiles']}")


if __name__ == "__main__":
    main()
