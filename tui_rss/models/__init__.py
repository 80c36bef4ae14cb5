"""Data models for tui_rss."""

from .schemas import Feed, FeedSource, FavoriteRecord, Item

__all__ = ["Feed", "FeedSource", "FavoriteRecord", "Item"]
