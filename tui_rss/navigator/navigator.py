"""Navigator: the reader's view-mode state machine.

The navigator owns the only NavigatorState. Every key press and every fetch
completion goes through ``dispatch``, which applies it to the current
snapshot under a lock, so transitions never interleave. Fetches run as
background tasks and come back as completion events; a completion is only
applied if its token is still the outstanding one and the state it was meant
for is still on screen.
"""

import asyncio
import itertools
import logging
import webbrowser
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, List, Optional, Set

from tui_rss.errors import ReaderError, ValidationError
from tui_rss.models.schemas import Feed, FeedSource, Item
from tui_rss.navigator.events import (
    Event,
    FeedLoaded,
    FeedValidated,
    Key,
    KeyEvent,
    WebpageLoaded,
)
from tui_rss.navigator.selection import (
    line_count,
    max_scroll,
    move_selection,
    rendered_article,
    scroll,
)
from tui_rss.navigator.state import NavigatorState, ViewMode
from tui_rss.services import fetcher
from tui_rss.services.feed_validator import (
    DUPLICATE_URL,
    check_feed_url,
    generate_feed_id,
    validate_feed_url,
)
from tui_rss.storage import database

logger = logging.getLogger(__name__)

Listener = Callable[[NavigatorState], None]

EMPTY_NAME = "Name cannot be empty"
NO_LINK = "This article has no link"


class Navigator:
    """Applies events to the reader state.

    Args:
        store: Persistent store exposing the ``tui_rss.storage`` operations
        fetch_text: Coroutine function fetching a URL as text
        open_url: Callable opening a URL in the system browser
        state: Initial state (defaults to an empty feed list)
    """

    def __init__(
        self,
        store: Any = database,
        fetch_text: Callable[[str], Awaitable[str]] = fetcher.fetch_text,
        open_url: Callable[[str], Any] = webbrowser.open,
        state: Optional[NavigatorState] = None,
    ):
        self.state = state or NavigatorState()
        self._store = store
        self._fetch_text = fetch_text
        self._open_url = open_url
        self._lock = asyncio.Lock()
        self._tokens = itertools.count(1)
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[Listener] = []

        self._key_handlers = {
            ViewMode.FEED_LIST: self._feed_list_key,
            ViewMode.ARTICLE_LIST: self._article_list_key,
            ViewMode.ARTICLE_VIEWER: self._viewer_key,
            ViewMode.ADD_FEED: self._add_feed_key,
            ViewMode.FAVORITES: self._favorites_key,
            ViewMode.EDIT_FEED: self._edit_feed_key,
        }

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener`` with every new state."""
        self._listeners.append(listener)

    async def start(self) -> NavigatorState:
        """Load subscriptions and favorites from the store."""
        sources = tuple(await self._store.list_feed_sources())
        favorite_ids = frozenset(await self._store.list_favorite_ids())
        logger.info(f"Loaded {len(sources)} feeds and {len(favorite_ids)} favorites")

        async with self._lock:
            self.state = replace(
                self.state,
                feed_sources=sources,
                favorite_ids=favorite_ids,
                selected_feed_index=0,
            )
        self._notify()
        return self.state

    async def dispatch(self, event: Event) -> NavigatorState:
        """Apply one event to the current state.

        Args:
            event: Key press or fetch completion

        Returns:
            The new state
        """
        async with self._lock:
            self.state = await self._apply(self.state, event)
        self._notify()
        return self.state

    async def wait_idle(self) -> None:
        """Wait until every started fetch has been applied."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    @property
    def pending_fetches(self) -> int:
        return len(self._tasks)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)

    async def _complete(self, completion: Awaitable[Event], on_error: Callable[[str], Event]) -> None:
        try:
            event = await completion
        except Exception as e:
            logger.error(f"Background fetch failed unexpectedly: {e}", exc_info=True)
            event = on_error(str(e) or type(e).__name__)
        await self.dispatch(event)

    async def _apply(self, state: NavigatorState, event: Event) -> NavigatorState:
        if isinstance(event, KeyEvent):
            return await self._on_key(state, event)
        if isinstance(event, FeedLoaded):
            return await self._on_feed_loaded(state, event)
        if isinstance(event, WebpageLoaded):
            return self._on_webpage_loaded(state, event)
        if isinstance(event, FeedValidated):
            return await self._on_feed_validated(state, event)
        raise TypeError(f"Unknown event: {event!r}")

    # Key handling

    async def _on_key(self, state: NavigatorState, event: KeyEvent) -> NavigatorState:
        if event.key is Key.QUIT:
            return replace(state, quitting=True)

        if state.status_message:
            state = replace(state, status_message=None)

        if state.loading:
            # Escape abandons the outstanding fetch, everything else waits for it
            if event.key is not Key.ESCAPE:
                return state
            logger.debug(f"Abandoning fetch {state.loading_token}")
            state = replace(state, loading_token=None)

        return await self._key_handlers[state.view_mode](state, event)

    async def _feed_list_key(self, state: NavigatorState, event: KeyEvent) -> NavigatorState:
        count = len(state.feed_sources)
        source = state.selected_feed

        if event.key is Key.UP:
            return replace(state, selected_feed_index=move_selection(state.selected_feed_index, -1, count))
        if event.key is Key.DOWN:
            return replace(state, selected_feed_index=move_selection(state.selected_feed_index, 1, count))

        if event.key is Key.ENTER:
            if source is None:
                return state
            token = self._spawn_feed_load(source)
            return replace(state, loading_token=token)

        command = event.command
        if command == "a":
            return replace(state, view_mode=ViewMode.ADD_FEED, input_text="", input_error=None)

        if command == "d" and source is not None:
            await self._store.remove_feed_source(source.id)
            logger.info(f"Removed feed {source.id} ({source.url})")
            sources = tuple(s for s in state.feed_sources if s.id != source.id)
            index = move_selection(state.selected_feed_index, -1, len(sources))
            return replace(state, feed_sources=sources, selected_feed_index=index)

        if command == "e" and source is not None:
            return replace(
                state,
                view_mode=ViewMode.EDIT_FEED,
                editing_feed_id=source.id,
                input_text=source.name,
                input_error=None,
            )

        if command == "s":
            favorites = tuple(await self._store.list_favorites())
            return replace(
                state,
                view_mode=ViewMode.FAVORITES,
                favorites=favorites,
                favorite_ids=frozenset(f.article_id for f in favorites),
                selected_article_index=0,
            )

        return state

    async def _article_list_key(self, state: NavigatorState, event: KeyEvent) -> NavigatorState:
        count = len(state.articles)
        article = state.selected_article

        if event.key is Key.UP:
            return replace(state, selected_article_index=move_selection(state.selected_article_index, -1, count))
        if event.key is Key.DOWN:
            return replace(state, selected_article_index=move_selection(state.selected_article_index, 1, count))

        if event.key is Key.ENTER and article is not None:
            return replace(
                state,
                view_mode=ViewMode.ARTICLE_VIEWER,
                current_article=article,
                scroll_position=0,
                viewing_webpage=False,
            )

        if event.command == "f" and article is not None:
            return await self._toggle_favorite(state, article)

        if event.key is Key.ESCAPE:
            return replace(
                state,
                view_mode=ViewMode.FEED_LIST,
                current_feed=None,
                selected_article_index=0,
            )

        return state

    async def _viewer_key(self, state: NavigatorState, event: KeyEvent) -> NavigatorState:
        article = state.current_article

        if event.key is Key.ESCAPE:
            return await self._leave_viewer(state)
        if article is None:
            return state

        if event.key in (Key.UP, Key.SCROLL_UP):
            return replace(state, scroll_position=max(0, state.scroll_position - 1))

        if event.key in (Key.DOWN, Key.SCROLL_DOWN):
            # Bound by what is actually displayed in the current mode
            lines = line_count(rendered_article(article, state.viewing_webpage))
            position = scroll(state.scroll_position, 1, max_scroll(lines))
            return replace(state, scroll_position=position)

        command = event.command
        if command == "f":
            return await self._toggle_favorite(state, article)

        if command == "w":
            if article.webpage_content is not None:
                return replace(state, viewing_webpage=not state.viewing_webpage, scroll_position=0)
            if not article.link:
                return replace(state, status_message=NO_LINK)
            token = self._spawn_webpage_load(article)
            return replace(state, loading_token=token)

        if command == "o":
            self._open_in_browser(article.link)

        return state

    async def _leave_viewer(self, state: NavigatorState) -> NavigatorState:
        state = replace(state, current_article=None, scroll_position=0, viewing_webpage=False)

        if state.current_feed is None:
            # Opened from the favorites view, which has no article list behind it
            favorites = tuple(await self._store.list_favorites())
            return replace(
                state,
                view_mode=ViewMode.FAVORITES,
                favorites=favorites,
                favorite_ids=frozenset(f.article_id for f in favorites),
                selected_article_index=move_selection(state.selected_article_index, 0, len(favorites)),
            )

        # The store is the source of truth: favorites may have changed anywhere
        favorite_ids = frozenset(await self._store.list_favorite_ids())
        return replace(
            state,
            view_mode=ViewMode.ARTICLE_LIST,
            current_feed=_mark_favorites(state.current_feed, favorite_ids),
            favorite_ids=favorite_ids,
        )

    async def _add_feed_key(self, state: NavigatorState, event: KeyEvent) -> NavigatorState:
        if event.key is Key.ESCAPE:
            return replace(state, view_mode=ViewMode.FEED_LIST, input_text="", input_error=None)

        if event.key is Key.ENTER:
            try:
                url = check_feed_url(state.input_text, (s.url for s in state.feed_sources))
            except ValidationError as e:
                return replace(state, input_error=str(e))
            token = self._spawn_validation(url)
            return replace(state, loading_token=token, input_error=None)

        return _edit_input(state, event)

    async def _edit_feed_key(self, state: NavigatorState, event: KeyEvent) -> NavigatorState:
        if event.key is Key.ESCAPE:
            return replace(
                state,
                view_mode=ViewMode.FEED_LIST,
                input_text="",
                input_error=None,
                editing_feed_id=None,
            )

        if event.key is Key.ENTER:
            name = state.input_text.strip()
            if not name:
                return replace(state, input_error=EMPTY_NAME)

            sources = []
            for source in state.feed_sources:
                if source.id == state.editing_feed_id:
                    source = replace(source, name=name)
                sources.append(source)

            await self._store.rename_feed_source(state.editing_feed_id, name)
            logger.info(f"Renamed feed {state.editing_feed_id} to '{name}'")
            return replace(
                state,
                view_mode=ViewMode.FEED_LIST,
                feed_sources=tuple(sources),
                input_text="",
                input_error=None,
                editing_feed_id=None,
            )

        return _edit_input(state, event)

    async def _favorites_key(self, state: NavigatorState, event: KeyEvent) -> NavigatorState:
        count = len(state.favorites)
        favorite = state.selected_favorite

        if event.key is Key.UP:
            return replace(state, selected_article_index=move_selection(state.selected_article_index, -1, count))
        if event.key is Key.DOWN:
            return replace(state, selected_article_index=move_selection(state.selected_article_index, 1, count))

        if event.key is Key.ESCAPE:
            return replace(state, view_mode=ViewMode.FEED_LIST, selected_article_index=0)

        if favorite is None:
            return state

        if event.key is Key.ENTER:
            # Favorites keep only a link, so the page itself is the content
            stub = Item(
                id=favorite.article_id,
                title=favorite.title,
                link=favorite.link,
                description="",
                content="",
                published_at=datetime.now(timezone.utc),
                is_favorite=True,
            )
            state = replace(
                state,
                view_mode=ViewMode.ARTICLE_VIEWER,
                current_feed=None,
                current_article=stub,
                scroll_position=0,
                viewing_webpage=False,
            )
            if not stub.link:
                return replace(state, status_message=NO_LINK)
            return replace(state, loading_token=self._spawn_webpage_load(stub))

        command = event.command
        if command == "o":
            self._open_in_browser(favorite.link)
            return state

        if command == "d":
            await self._store.remove_favorite(favorite.article_id)
            favorites = tuple(await self._store.list_favorites())
            index = move_selection(state.selected_article_index, -1, len(favorites))
            return replace(
                state,
                favorites=favorites,
                favorite_ids=state.favorite_ids - {favorite.article_id},
                selected_article_index=index,
            )

        return state

    async def _toggle_favorite(self, state: NavigatorState, article: Item) -> NavigatorState:
        feed_name = state.current_feed.title if state.current_feed else None
        is_favorite = await self._store.toggle_favorite(
            article.id, article.title, article.link, feed_name
        )
        logger.info(f"Article {article.id} favorite={is_favorite}")

        if is_favorite:
            favorite_ids = state.favorite_ids | {article.id}
        else:
            favorite_ids = state.favorite_ids - {article.id}

        current_article = state.current_article
        if current_article is not None and current_article.id == article.id:
            current_article = replace(current_article, is_favorite=is_favorite)

        current_feed = state.current_feed
        if current_feed is not None:
            current_feed = replace(current_feed, items=tuple(
                replace(item, is_favorite=is_favorite) if item.id == article.id else item
                for item in current_feed.items
            ))

        return replace(
            state,
            favorite_ids=favorite_ids,
            current_article=current_article,
            current_feed=current_feed,
        )

    def _open_in_browser(self, url: str) -> None:
        if not url:
            return
        logger.info(f"Opening in browser: {url}")
        self._open_url(url)

    # Fetches and their completions

    def _spawn_feed_load(self, source: FeedSource) -> int:
        token = next(self._tokens)
        self._start(
            self._load_feed(token, source),
            lambda message: FeedLoaded(token, source.id, error=message),
        )
        return token

    def _spawn_webpage_load(self, article: Item) -> int:
        token = next(self._tokens)
        self._start(
            self._load_webpage(token, article),
            lambda message: WebpageLoaded(token, article.id, error=message),
        )
        return token

    def _spawn_validation(self, url: str) -> int:
        token = next(self._tokens)
        self._start(
            self._validate(token, url),
            lambda message: FeedValidated(token, url, error=message),
        )
        return token

    def _start(self, completion: Awaitable[Event], on_error: Callable[[str], Event]) -> None:
        task = asyncio.ensure_future(self._complete(completion, on_error))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _load_feed(self, token: int, source: FeedSource) -> FeedLoaded:
        try:
            feed = await fetcher.load_feed(source.url, self._fetch_text)
        except ReaderError as e:
            logger.error(f"Failed to load feed {source.url}: {e}")
            return FeedLoaded(token, source.id, error=str(e))
        return FeedLoaded(token, source.id, feed=feed)

    async def _load_webpage(self, token: int, article: Item) -> WebpageLoaded:
        try:
            html = await self._fetch_text(article.link)
        except ReaderError as e:
            logger.error(f"Failed to fetch webpage {article.link}: {e}")
            return WebpageLoaded(token, article.id, error=str(e))
        return WebpageLoaded(token, article.id, html=html)

    async def _validate(self, token: int, url: str) -> FeedValidated:
        try:
            result = await validate_feed_url(url, self._fetch_text)
        except ValidationError as e:
            return FeedValidated(token, url, error=str(e))
        return FeedValidated(token, url, feed_url=result.url, title=result.title)

    async def _on_feed_loaded(self, state: NavigatorState, event: FeedLoaded) -> NavigatorState:
        if event.token != state.loading_token:
            logger.debug(f"Discarding stale feed load {event.token}")
            return state
        state = replace(state, loading_token=None)

        source = state.selected_feed
        if state.view_mode is not ViewMode.FEED_LIST or source is None or source.id != event.source_id:
            return state

        if event.error is not None or event.feed is None:
            return replace(state, status_message=f"Failed to load feed: {event.error}")

        favorite_ids = frozenset(await self._store.list_favorite_ids())
        return replace(
            state,
            view_mode=ViewMode.ARTICLE_LIST,
            current_feed=_mark_favorites(event.feed, favorite_ids),
            current_article=None,
            favorite_ids=favorite_ids,
            selected_article_index=0,
            scroll_position=0,
            viewing_webpage=False,
        )

    def _on_webpage_loaded(self, state: NavigatorState, event: WebpageLoaded) -> NavigatorState:
        if event.token != state.loading_token:
            logger.debug(f"Discarding stale webpage load {event.token}")
            return state
        state = replace(state, loading_token=None)

        article = state.current_article
        if state.view_mode is not ViewMode.ARTICLE_VIEWER or article is None or article.id != event.article_id:
            return state

        if event.error is not None or event.html is None:
            return replace(state, status_message=f"Failed to fetch webpage: {event.error}")

        article = replace(article, webpage_content=event.html)
        current_feed = state.current_feed
        if current_feed is not None:
            current_feed = replace(current_feed, items=tuple(
                replace(item, webpage_content=event.html) if item.id == article.id else item
                for item in current_feed.items
            ))

        return replace(
            state,
            current_article=article,
            current_feed=current_feed,
            viewing_webpage=True,
            scroll_position=0,
        )

    async def _on_feed_validated(self, state: NavigatorState, event: FeedValidated) -> NavigatorState:
        if event.token != state.loading_token:
            logger.debug(f"Discarding stale validation {event.token}")
            return state
        state = replace(state, loading_token=None)

        if state.view_mode is not ViewMode.ADD_FEED or state.input_text.strip() != event.url:
            return state

        if event.error is not None:
            return replace(state, input_error=event.error)

        if _has_url(state.feed_sources, event.feed_url):
            return replace(state, input_error=DUPLICATE_URL)

        source = FeedSource(
            id=generate_feed_id(event.feed_url),
            name=event.title,
            url=event.feed_url,
        )
        await self._store.add_feed_source(source)
        logger.info(f"Added feed {source.id} ({source.url})")

        return replace(
            state,
            view_mode=ViewMode.FEED_LIST,
            feed_sources=state.feed_sources + (source,),
            input_text="",
            input_error=None,
        )


def _mark_favorites(feed: Feed, favorite_ids: FrozenSet[str]) -> Feed:
    return replace(feed, items=tuple(
        replace(item, is_favorite=item.id in favorite_ids) for item in feed.items
    ))


def _has_url(sources: Iterable[FeedSource], url: str) -> bool:
    return any(source.url == url for source in sources)


def _edit_input(state: NavigatorState, event: KeyEvent) -> NavigatorState:
    """Shared text-entry handling for the add-feed and edit-feed dialogs."""
    if event.key is Key.BACKSPACE:
        return replace(state, input_text=state.input_text[:-1], input_error=None)
    if event.key is Key.CHAR and event.char and event.char.isprintable():
        return replace(state, input_text=state.input_text + event.char, input_error=None)
    return state
