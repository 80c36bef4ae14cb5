"""Rendering of feed articles and webpages as terminal text."""

from .renderer import (
    NO_CONTENT,
    NO_READABLE_CONTENT,
    render_summary,
    render_webpage,
)

__all__ = [
    "NO_CONTENT",
    "NO_READABLE_CONTENT",
    "render_summary",
    "render_webpage",
]
