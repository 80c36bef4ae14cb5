"""Textual front end for the reader.

The app owns no reader state: it translates terminal input into navigator
events and redraws a single Static widget whenever the navigator publishes
a new state.
"""

import logging
from typing import Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from tui_rss.navigator import Key, KeyEvent, Navigator, NavigatorState
from tui_rss.navigator.state import TEXT_ENTRY_MODES
from tui_rss.storage import close_database
from tui_rss.ui.views import render

logger = logging.getLogger(__name__)

NAMED_KEYS = {
    "up": Key.UP,
    "down": Key.DOWN,
    "enter": Key.ENTER,
    "escape": Key.ESCAPE,
    "backspace": Key.BACKSPACE,
    "pageup": Key.SCROLL_UP,
    "pagedown": Key.SCROLL_DOWN,
}


def translate_key(key: str, character: Optional[str], text_entry: bool = False) -> Optional[KeyEvent]:
    """Map a textual key press to a navigator key event.

    Args:
        key: Textual key name (``"up"``, ``"ctrl+c"``, ``"a"``)
        character: Printable character for the key, if any
        text_entry: Whether a text input dialog is active

    Returns:
        KeyEvent, or None for keys the reader ignores
    """
    if key == "ctrl+c":
        return KeyEvent(Key.QUIT)
    if key in NAMED_KEYS:
        return KeyEvent(NAMED_KEYS[key])
    if key == "q" and not text_entry:
        return KeyEvent(Key.QUIT)
    if character and len(character) == 1 and character.isprintable():
        return KeyEvent.character(character)
    return None


class ReaderApp(App[None]):
    """Terminal RSS/Atom reader."""

    TITLE = "Tui-RSS"

    CSS = """
    #screen {
        padding: 1 2;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit_reader", "Quit", show=False, priority=True),
    ]

    def __init__(self, navigator: Optional[Navigator] = None):
        super().__init__()
        self.navigator = navigator or Navigator()

    def compose(self) -> ComposeResult:
        yield Static(id="screen")

    async def on_mount(self) -> None:
        """Load subscriptions and draw the feed list."""
        self.navigator.subscribe(self._show)
        await self.navigator.start()

    async def on_unmount(self) -> None:
        await close_database()

    async def on_key(self, event: events.Key) -> None:
        state = self.navigator.state
        key_event = translate_key(
            event.key,
            event.character,
            text_entry=state.view_mode in TEXT_ENTRY_MODES,
        )
        if key_event is None:
            return
        event.stop()
        event.prevent_default()
        await self.navigator.dispatch(key_event)

    async def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        await self.navigator.dispatch(KeyEvent(Key.SCROLL_UP))

    async def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        await self.navigator.dispatch(KeyEvent(Key.SCROLL_DOWN))

    async def action_quit_reader(self) -> None:
        await self.navigator.dispatch(KeyEvent(Key.QUIT))

    def _show(self, state: NavigatorState) -> None:
        if state.quitting:
            logger.info("Quitting")
            self.exit()
            return
        self.query_one("#screen", Static).update(render(state))
