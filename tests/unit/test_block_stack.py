"""Tests for BlockStack section capture."""

import pytest

from quill import EmptyBlockStackError
from quill.template.blocks import BlockStack


class TestBlockStack:
    def test_capture(self):
        blocks = BlockStack()
        blocks.begin("title")
        blocks.write("Home")
        assert blocks.end() == "title"
        assert blocks.get("title") == "Home"
        assert "title" in blocks

    def test_end_appends(self):
        blocks = BlockStack()
        blocks.store("scripts", "<a>")
        blocks.begin("scripts")
        blocks.write("<b>")
        blocks.end()
        assert blocks.get("scripts") == "<a><b>"

    def test_overwrite_replaces(self):
        blocks = BlockStack()
        blocks.store("sidebar", "child")
        blocks.begin("sidebar")
        blocks.write("parent")
        blocks.end(overwrite=True)
        assert blocks.get("sidebar") == "parent"

    def test_nested_blocks(self):
        blocks = BlockStack()
        blocks.begin("outer")
        blocks.write("a")
        blocks.begin("inner")
        blocks.write("b")
        assert blocks.depth == 2
        assert blocks.end() == "inner"
        blocks.write("c")
        assert blocks.end() == "outer"
        assert blocks.get("outer") == "ac"
        assert blocks.get("inner") == "b"

    def test_get_default(self):
        assert BlockStack().get("missing", "fallback") == "fallback"
        assert "missing" not in BlockStack()

    def test_write_without_open_block(self):
        with pytest.raises(EmptyBlockStackError):
            BlockStack().write("x")

    def test_end_without_open_block(self):
        with pytest.raises(EmptyBlockStackError):
            BlockStack().end()

    def test_flush_returns_open_output(self):
        blocks = BlockStack()
        blocks.begin("content")
        blocks.write("a")
        blocks.begin("section")
        blocks.write("b")
        assert blocks.flush() == "ab"
        assert blocks.depth == 0
