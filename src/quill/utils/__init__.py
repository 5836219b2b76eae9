"""Shared utilities for Quill."""

from quill.utils.html import Markup, html_escape

__all__ = ["Markup", "html_escape"]
