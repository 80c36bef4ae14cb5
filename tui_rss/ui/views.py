"""Screen rendering for the reader.

``render`` is a pure function of a NavigatorState snapshot: it reads the
state and returns the rich Text to display, and never changes anything.
"""

from datetime import datetime, timezone
from typing import List, Optional

from rich.text import Text

from tui_rss.navigator.selection import (
    ARTICLE_WINDOW,
    FAVORITES_WINDOW,
    FEED_WINDOW,
    VISIBLE_LINES,
    max_scroll,
    rendered_article,
    visible_window,
)
from tui_rss.navigator.state import NavigatorState, ViewMode
from tui_rss.storage.database import DEFAULT_FEEDS

ACCENT = "#bada55"
ERROR = "#ff6b6b"

WINDOW_WIDTH = 78
WIDE_WINDOW_WIDTH = 90
STATUS_WIDTH = 92

TITLE_LENGTH = 68
VIEWER_TITLE_LENGTH = 50

HELP = {
    ViewMode.FEED_LIST: "↑↓: Navigate | A: Add | E: Edit | D: Delete | S: Saved | Enter: Open | Q: Quit",
    ViewMode.ARTICLE_LIST: "↑↓: Navigate | Enter: Read | F: Favorite | Esc: Back | Q: Quit",
    ViewMode.ARTICLE_VIEWER: "↑↓: Scroll | O: Open | W: Web | F: Fav | Esc: Back",
    ViewMode.ADD_FEED: "Type URL | Enter: Add | Esc: Cancel",
    ViewMode.FAVORITES: "↑↓: Navigate | Enter: Read | O: Browser | D: Remove | Esc: Back",
    ViewMode.EDIT_FEED: "Type name | Enter: Save | Esc: Cancel",
}


def truncate(text: str, length: int) -> str:
    """Shorten ``text`` to ``length`` characters, ending with an ellipsis."""
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


def format_date(published: datetime, now: Optional[datetime] = None) -> str:
    """Relative date for recent articles, calendar date for older ones."""
    if now is None:
        now = datetime.now(timezone.utc)
    days = (now - published).days

    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    return published.strftime("%Y-%m-%d")


def render(state: NavigatorState, now: Optional[datetime] = None) -> Text:
    """Render the whole screen for a state snapshot.

    Args:
        state: Current navigator state
        now: Reference time for relative dates (defaults to the current time)

    Returns:
        Window with the active view followed by the status bar
    """
    wide = state.view_mode is ViewMode.ARTICLE_VIEWER
    width = WIDE_WINDOW_WIDTH if wide else WINDOW_WIDTH

    if state.loading and state.view_mode is not ViewMode.ADD_FEED:
        body = [Text("Loading...")]
    else:
        body = _body(state, now)

    screen = Text()
    screen.append(_top_border(window_title(state), width), style=f"bold {ACCENT}")
    screen.append("\n\n")
    for line in body:
        screen.append("   ")
        screen.append_text(line)
        screen.append("\n")
    screen.append("\n")
    screen.append("╚" + "═" * (width - 2) + "╝", style=f"bold {ACCENT}")
    screen.append("\n")
    screen.append_text(status_bar(state))
    return screen


def window_title(state: NavigatorState) -> str:
    mode = state.view_mode
    if mode is ViewMode.FEED_LIST:
        return "📰 RSS FEEDS"
    if mode is ViewMode.ARTICLE_LIST:
        return f"📖 {state.current_feed.title}" if state.current_feed else "📖 Articles"
    if mode is ViewMode.ARTICLE_VIEWER:
        article = state.current_article
        if article is None:
            return "Article"
        star = "★ " if article.is_favorite else ""
        title = article.title
        if len(title) > VIEWER_TITLE_LENGTH:
            title = title[:VIEWER_TITLE_LENGTH] + "..."
        return star + title
    if mode is ViewMode.ADD_FEED:
        return "➕ Add Feed"
    if mode is ViewMode.FAVORITES:
        return "⭐ Favorites"
    return "✏️ Edit Feed"


def status_bar(state: NavigatorState) -> Text:
    bar = Text("─" * STATUS_WIDTH, style=f"dim {ACCENT}")
    bar.append("\n")
    bar.append(" 📡 Tui-RSS ", style=ACCENT)
    bar.append(" ")
    if state.status_message:
        bar.append(f"✗ {state.status_message}", style=ERROR)
    else:
        bar.append(HELP[state.view_mode], style="dim")
    return bar


def _top_border(title: str, width: int) -> str:
    padded = f" {title} "
    remaining = max(0, width - 2 - len(padded))
    left = remaining // 2
    return "╔" + "═" * left + padded + "═" * (remaining - left) + "╗"


def _body(state: NavigatorState, now: Optional[datetime]) -> List[Text]:
    mode = state.view_mode
    if mode is ViewMode.FEED_LIST:
        return _feed_list(state)
    if mode is ViewMode.ARTICLE_LIST:
        return _article_list(state, now)
    if mode is ViewMode.ARTICLE_VIEWER:
        return _article_viewer(state, now)
    if mode is ViewMode.FAVORITES:
        return _favorites(state)
    return _input_dialog(state)


def _selectable(label: str, selected: bool) -> Text:
    prefix = "▶ " if selected else "  "
    return Text(prefix + label, style=f"bold {ACCENT}" if selected else "")


def _position(selected: int, count: int, window: int) -> List[Text]:
    if count <= window:
        return []
    return [Text(""), Text(f"{selected + 1} of {count}", style="dim")]


def _feed_list(state: NavigatorState) -> List[Text]:
    sources = state.feed_sources
    if not sources:
        lines = [
            Text("📭 No Feeds", style=f"bold {ACCENT}"),
            Text(""),
            Text("You haven't added any RSS feeds yet.", style="dim"),
            Text(""),
            Text("Press A to add your first feed"),
            Text(""),
            Text(""),
            Text("Popular feeds to get started:", style="dim"),
        ]
        lines.extend(Text(f"• {source.url}", style="dim") for source in DEFAULT_FEEDS)
        return lines

    start, visible = visible_window(sources, state.selected_feed_index, FEED_WINDOW)
    lines: List[Text] = []
    for offset, source in enumerate(visible):
        if offset:
            lines.append(Text(""))
        lines.append(_selectable(source.name, start + offset == state.selected_feed_index))
    return lines + _position(state.selected_feed_index, len(sources), FEED_WINDOW)


def _article_list(state: NavigatorState, now: Optional[datetime]) -> List[Text]:
    articles = state.articles
    if not articles:
        return [Text("No articles found", style="dim")]

    start, visible = visible_window(articles, state.selected_article_index, ARTICLE_WINDOW)
    lines: List[Text] = []
    for offset, article in enumerate(visible):
        selected = start + offset == state.selected_article_index
        if offset:
            lines.append(Text(""))
        star = "★ " if article.is_favorite else ""
        lines.append(_selectable(star + truncate(article.title, TITLE_LENGTH), selected))
        if selected:
            detail = format_date(article.published_at, now)
            if article.author:
                detail += f" • {truncate(article.author, 20)}"
            lines.append(Text(f"    {detail}", style="dim"))
    return lines + _position(state.selected_article_index, len(articles), ARTICLE_WINDOW)


def _article_viewer(state: NavigatorState, now: Optional[datetime]) -> List[Text]:
    article = state.current_article
    if article is None:
        return []

    webpage = state.viewing_webpage and article.webpage_content is not None
    rendered = rendered_article(article, state.viewing_webpage).split("\n")
    limit = max_scroll(len(rendered))
    position = min(state.scroll_position, limit)

    meta = format_date(article.published_at, now)
    if article.author:
        meta += f" • {article.author}"

    lines = [Text(meta, style="dim"), Text("")]
    lines.extend(Text(line) for line in rendered[position:position + VISIBLE_LINES])
    lines.append(Text(""))

    if limit:
        percent = min(100, round(position / limit * 100))
        where = "Webpage" if webpage else "[W] full page"
        lines.append(Text(f"↑↓ scroll • {percent}% • {where}", style=f"dim {ACCENT}"))
    else:
        where = "Webpage" if webpage else "[W] load full page"
        lines.append(Text(f"{where} • [O] open in browser", style=f"dim {ACCENT}"))
    return lines


def _favorites(state: NavigatorState) -> List[Text]:
    favorites = state.favorites
    if not favorites:
        return [
            Text("★ No Favorites Yet", style=f"bold {ACCENT}"),
            Text(""),
            Text("Press F on any article to save it here.", style="dim"),
        ]

    plural = "" if len(favorites) == 1 else "s"
    lines = [Text(f"★ {len(favorites)} saved article{plural}", style="dim")]

    start, visible = visible_window(favorites, state.selected_article_index, FAVORITES_WINDOW)
    for offset, favorite in enumerate(visible):
        selected = start + offset == state.selected_article_index
        lines.append(Text(""))
        lines.append(_selectable(truncate(favorite.title, TITLE_LENGTH), selected))
        if selected and favorite.feed_name:
            lines.append(Text(f"    from {favorite.feed_name}", style="dim"))
    return lines + _position(state.selected_article_index, len(favorites), FAVORITES_WINDOW)


def _input_dialog(state: NavigatorState) -> List[Text]:
    adding = state.view_mode is ViewMode.ADD_FEED
    if adding:
        heading = "Add New Feed"
        prompt = "Enter RSS feed URL and press Enter to validate:"
    else:
        heading = "Rename Feed"
        prompt = "Enter a new name and press Enter to save:"

    field = Text("▸ ", style=ACCENT)
    field.append(state.input_text or " ")
    field.append("▋", style=f"blink {ACCENT}")

    lines = [
        Text(heading, style=f"bold {ACCENT}"),
        Text(""),
        Text(prompt, style="dim"),
        Text(""),
        field,
    ]

    if state.loading:
        lines.extend([Text(""), Text("⏳ Validating feed...", style=ACCENT)])
    if state.input_error:
        lines.extend([Text(""), Text(f"✗ {state.input_error}", style=ERROR)])

    if adding:
        lines.extend([Text(""), Text(""), Text("Example: https://example.com/rss.xml", style="dim")])
    return lines
