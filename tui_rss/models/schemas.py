"""Data models for tui_rss.

This module defines the canonical feed, article and subscription structures.
All of them are frozen: views receive copies, never shared mutable objects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class FeedSource:
    """Represents a subscribed feed."""

    id: str
    name: str
    url: str


@dataclass(frozen=True)
class Item:
    """Represents a normalized article from an RSS or Atom feed.

    ``webpage_content`` is None until the full page has been fetched.
    """

    id: str
    title: str
    link: str
    description: str
    content: str
    published_at: datetime
    author: Optional[str] = None
    webpage_content: Optional[str] = None
    is_favorite: bool = False

    @property
    def body(self) -> str:
        """HTML shown in summary mode."""
        return self.content or self.description or ""


@dataclass(frozen=True)
class Feed:
    """Represents a parsed feed. Not persisted, rebuilt on every load."""

    title: str
    description: str
    link: str
    items: Tuple[Item, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FavoriteRecord:
    """Represents a saved article in the favorites store."""

    article_id: str
    title: str
    link: str
    feed_name: Optional[str] = None
