"""Navigation state machine for tui_rss."""

from .events import Event, FeedLoaded, FeedValidated, Key, KeyEvent, WebpageLoaded
from .navigator import Navigator
from .state import NavigatorState, ViewMode

__all__ = [
    "Event",
    "FeedLoaded",
    "FeedValidated",
    "Key",
    "KeyEvent",
    "Navigator",
    "NavigatorState",
    "ViewMode",
    "WebpageLoaded",
]
