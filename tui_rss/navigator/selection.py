"""Selection, windowing and scrolling helpers.

Pure functions shared by the navigator (to bound its indices) and the views
(to decide what is on screen).
"""

from typing import Sequence, Tuple, TypeVar

from tui_rss.models.schemas import Item
from tui_rss.rendering import render_summary, render_webpage

T = TypeVar("T")

VISIBLE_LINES = 18

FEED_WINDOW = 8
ARTICLE_WINDOW = 12
FAVORITES_WINDOW = 10


def window_start(selected: int, count: int, window: int) -> int:
    """First visible index, keeping two items above the selection when possible."""
    return max(0, min(selected - 2, max(0, count - window)))


def visible_window(items: Sequence[T], selected: int, window: int) -> Tuple[int, Sequence[T]]:
    """Slice of ``items`` to display and the index it starts at."""
    start = window_start(selected, len(items), window)
    return start, items[start:start + window]


def move_selection(index: int, delta: int, count: int) -> int:
    """Move a selection by ``delta``, clamped to the list (no wrap-around)."""
    if count <= 0:
        return 0
    return max(0, min(count - 1, index + delta))


def rendered_article(article: Item, viewing_webpage: bool) -> str:
    """Text currently displayed for an article in the viewer."""
    if viewing_webpage and article.webpage_content is not None:
        return render_webpage(article.webpage_content)
    return render_summary(article.body)


def line_count(text: str) -> int:
    return len(text.split("\n"))


def max_scroll(lines: int, visible: int = VISIBLE_LINES) -> int:
    return max(0, lines - visible)


def scroll(position: int, delta: int, limit: int) -> int:
    """Move the scroll position, clamped to ``[0, limit]``."""
    return max(0, min(limit, position + delta))
