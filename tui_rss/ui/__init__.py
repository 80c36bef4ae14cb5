"""Terminal presentation for tui_rss."""

from .app import ReaderApp, translate_key
from .views import render

__all__ = ["ReaderApp", "render", "translate_key"]
