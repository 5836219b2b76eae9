"""Fixtures for the runnable quill examples.

Every example directory holds an ``app.py`` that builds its environment at
import time and exposes the rendered output as module attributes. The
``example_app`` fixture imports that file fresh for each test, with
``QUILL_CACHE_DIR`` pointing at the test's own temporary directory so
examples that persist artifacts never share or leak a cache.
"""

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

CACHE_DIR_VARIABLE = "QUILL_CACHE_DIR"


@pytest.fixture
def example_cache_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    cache_dir = tmp_path / "artifacts"
    monkeypatch.setenv(CACHE_DIR_VARIABLE, str(cache_dir))
    return cache_dir


@pytest.fixture
def example_app(request: pytest.FixtureRequest, example_cache_dir: Path) -> ModuleType:
    """Import the ``app.py`` beside the requesting test as a new module."""
    app_path = Path(request.path).parent / "app.py"
    module_spec = importlib.util.spec_from_file_location(
        f"quill_example_{app_path.parent.name}", app_path
    )
    if module_spec is None or module_spec.loader is None:
        pytest.fail(f"Cannot import example {app_path}")
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module
