"""Pytest configuration and fixtures for Quill tests."""

import pytest

from quill import DictLoader, Environment


@pytest.fixture
def env():
    """Create a basic Quill Environment (no loader, in-memory artifacts)."""
    return Environment()


@pytest.fixture
def loader():
    """DictLoader with a small layout hierarchy."""
    return DictLoader(
        {
            "layout": (
                "<html><head><title>@yield('title', 'Default')</title></head>"
                "<body>@yield('content')</body></html>"
            ),
            "child": (
                "@extends('layout')\n"
                "@section('title', 'Child Page')\n"
                "<p>Hello World</p>"
            ),
            "partial": "<p>Partial {{ $name }}</p>",
        }
    )


@pytest.fixture
def env_with_loader(loader):
    """Create a Quill Environment backed by the `loader` fixture."""
    return Environment(loader=loader)


@pytest.fixture
def env_fs_cache(tmp_path):
    """Environment persisting artifacts under a temporary directory."""
    return Environment(loader=DictLoader({}), cache_dir=tmp_path / "artifacts")


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )


def assert_contains(template_result: str, *expected_parts: str) -> None:
    """Assert template result contains all expected parts."""
    for part in expected_parts:
        assert part in template_result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {template_result!r}"
        )
