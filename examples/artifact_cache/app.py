"""Artifact cache -- cold start optimization.

The first Environment compiles the template and writes the generated
Python module to the cache directory. A second Environment pointed at the
same directory finds the artifact up to date (its recorded source mtime is
not older than the file) and executes it without compiling.

The cache directory is taken from $QUILL_CACHE_DIR and defaults to
`.cache/` beside this file. It is cleared first so the first load is cold.

Run:
    python app.py
"""

import os
from pathlib import Path

from quill import Environment, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"

cache_dir = Path(os.environ.get("QUILL_CACHE_DIR", Path(__file__).parent / ".cache"))

context = {"title": "Cached Page", "entries": ["alpha", "beta", "gamma"]}

# First load: compile from source + write the artifact (miss)
env1 = Environment(loader=FileSystemLoader(templates_dir), cache_dir=cache_dir)
env1.clear_cache()
output_first = env1.render("page", context)
stats_after_first = env1.artifact_store.stats()
compiles_first = env1.cache.stats()["compiles"]

# Second environment: same cache directory, empty in-process cache (hit)
env2 = Environment(loader=FileSystemLoader(templates_dir), cache_dir=cache_dir)
output_second = env2.render("page", context)
stats_after_second = env2.artifact_store.stats()
compiles_second = env2.cache.stats()["compiles"]

artifact_code = env2.compile("page").code

output = output_first


def main() -> None:
    print("=== First Load (compile + store) ===")
    print(f"  Output: {output_first[:60]}...")
    print(f"  Cache files: {stats_after_first['file_count']}")
    print(f"  Cache bytes: {stats_after_first['total_bytes']}")
    print()
    print("=== Second Load (from artifact) ===")
    print(f"  Compilations: {compiles_second}")
    print(f"  Outputs match: {output_first == output_second}")
    print()
    print("=== Generated module ===")
    print(artifact_code)


if __name__ == "__main__":
    main()
