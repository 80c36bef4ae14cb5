"""Events consumed by the navigator.

Key events come from the input layer; the other events are completions of
fetches the navigator started, each carrying the token of the request and
enough identity to tell whether it still applies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from tui_rss.models.schemas import Feed


class Key(Enum):
    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    CHAR = "char"
    QUIT = "quit"


@dataclass(frozen=True)
class KeyEvent:
    """A semantic key press. ``char`` is set for ``Key.CHAR`` only."""

    key: Key
    char: str = ""

    @classmethod
    def character(cls, char: str) -> "KeyEvent":
        return cls(Key.CHAR, char)

    @property
    def command(self) -> str:
        """Lower-cased character, for letter commands."""
        return self.char.lower() if self.key is Key.CHAR else ""


@dataclass(frozen=True)
class FeedLoaded:
    token: int
    source_id: str
    feed: Optional[Feed] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class WebpageLoaded:
    token: int
    article_id: str
    html: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class FeedValidated:
    token: int
    url: str
    feed_url: str = ""
    title: str = ""
    error: Optional[str] = None


Event = Union[KeyEvent, FeedLoaded, WebpageLoaded, FeedValidated]
