"""Storage layer for tui_rss."""

from .database import (
    get_database,
    init_database,
    close_database,
    list_feed_sources,
    add_feed_source,
    remove_feed_source,
    rename_feed_source,
    list_favorites,
    list_favorite_ids,
    is_favorite,
    add_favorite,
    remove_favorite,
    toggle_favorite,
)

__all__ = [
    "get_database",
    "init_database",
    "close_database",
    "list_feed_sources",
    "add_feed_source",
    "remove_feed_source",
    "rename_feed_source",
    "list_favorites",
    "list_favorite_ids",
    "is_favorite",
    "add_favorite",
    "remove_favorite",
    "toggle_favorite",
]
