"""Navigator state."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from tui_rss.models.schemas import FavoriteRecord, Feed, FeedSource, Item


class ViewMode(str, Enum):
    FEED_LIST = "feed-list"
    ARTICLE_LIST = "article-list"
    ARTICLE_VIEWER = "article-viewer"
    ADD_FEED = "add-feed"
    FAVORITES = "favorites"
    EDIT_FEED = "edit-feed"


TEXT_ENTRY_MODES = frozenset({ViewMode.ADD_FEED, ViewMode.EDIT_FEED})


@dataclass(frozen=True)
class NavigatorState:
    """Snapshot of everything the reader shows.

    The navigator owns the current snapshot and replaces it on every
    transition; the presentation layer only ever reads snapshots.

    Attributes:
        favorite_ids: Article ids in the favorites store
        favorites: Favorites list shown by the favorites view
        editing_feed_id: Feed being renamed in edit-feed mode
        loading_token: Token of the outstanding fetch, None when idle
        status_message: Last non-fatal error, cleared by the next key
        quitting: Set once the user asked to quit
    """

    view_mode: ViewMode = ViewMode.FEED_LIST
    selected_feed_index: int = 0
    selected_article_index: int = 0
    current_feed: Optional[Feed] = None
    current_article: Optional[Item] = None
    feed_sources: Tuple[FeedSource, ...] = ()
    favorite_ids: FrozenSet[str] = frozenset()
    favorites: Tuple[FavoriteRecord, ...] = ()
    scroll_position: int = 0
    viewing_webpage: bool = False
    input_text: str = ""
    input_error: Optional[str] = None
    editing_feed_id: Optional[str] = None
    loading_token: Optional[int] = None
    status_message: Optional[str] = None
    quitting: bool = False

    @property
    def loading(self) -> bool:
        return self.loading_token is not None

    @property
    def selected_feed(self) -> Optional[FeedSource]:
        if 0 <= self.selected_feed_index < len(self.feed_sources):
            return self.feed_sources[self.selected_feed_index]
        return None

    @property
    def articles(self) -> Tuple[Item, ...]:
        return self.current_feed.items if self.current_feed else ()

    @property
    def selected_article(self) -> Optional[Item]:
        if 0 <= self.selected_article_index < len(self.articles):
            return self.articles[self.selected_article_index]
        return None

    @property
    def selected_favorite(self) -> Optional[FavoriteRecord]:
        if 0 <= self.selected_article_index < len(self.favorites):
            return self.favorites[self.selected_article_index]
        return None
