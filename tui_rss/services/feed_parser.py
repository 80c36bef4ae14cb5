"""Feed normalizer.

This module turns a generic RSS 2.0 or Atom tree (see ``xml_tree``) into the
canonical ``Feed``/``Item`` model.
"""

import hashlib
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional

from tui_rss.errors import FormatError
from tui_rss.models.schemas import Feed, Item
from tui_rss.services.entities import decode_entities

logger = logging.getLogger(__name__)

UNTITLED_FEED = "Untitled Feed"
UNTITLED_ITEM = "Untitled"


def generate_item_id(link: str, title: str = "", index: int = 0) -> str:
    """Generate a stable identifier for a feed item.

    The ordinal breaks ties between entries sharing link and title. Ids change
    if a feed edits or reorders its entries.

    Args:
        link: Item link, or guid/id when there is no link
        title: Item title
        index: Zero-based position of the item in the feed

    Returns:
        32 character hex digest
    """
    source = f"{link}-{title}-{index}"
    return hashlib.sha256(source.encode("utf-8")).hexdigest()[:32]


def parse_feed(tree: Dict[str, Any]) -> Feed:
    """Normalize a parsed feed tree.

    Args:
        tree: Generic tree with the document root as its only key

    Returns:
        Feed with items in document order

    Raises:
        FormatError: If the tree is neither RSS nor Atom
    """
    if "rss" in tree or "channel" in tree:
        return _parse_rss(tree)
    if "feed" in tree:
        return _parse_atom(tree)
    raise FormatError("Unknown feed format")


def _parse_rss(tree: Dict[str, Any]) -> Feed:
    rss = tree.get("rss")
    channel = rss.get("channel") if isinstance(rss, dict) else None
    if channel is None:
        channel = tree.get("channel")
    if isinstance(channel, list):
        channel = channel[0] if channel else None
    if not isinstance(channel, dict):
        raise FormatError("Invalid RSS format")

    items = []
    for index, entry in enumerate(_as_list(channel.get("item"))):
        if not isinstance(entry, dict):
            continue

        link = _text(entry.get("link"))
        raw_title = _text(entry.get("title"))
        guid = _text(entry.get("guid"))
        body = (
            _text(entry.get("content:encoded"))
            or _text(entry.get("content"))
            or _text(entry.get("description"))
        )
        author = decode_entities(_text(entry.get("author")) or _text(entry.get("dc:creator")))

        items.append(Item(
            id=generate_item_id(link or guid, raw_title, index),
            title=decode_entities(raw_title) or UNTITLED_ITEM,
            link=link,
            description=_text(entry.get("description")),
            content=body,
            published_at=parse_date(_text(entry.get("pubDate"))) or _now(),
            author=author or None,
        ))

    feed = Feed(
        title=decode_entities(_text(channel.get("title"))) or UNTITLED_FEED,
        description=decode_entities(_text(channel.get("description"))),
        link=_text(channel.get("link")),
        items=tuple(items),
    )
    logger.debug(f"Parsed RSS feed '{feed.title}' with {len(items)} items")
    return feed


def _parse_atom(tree: Dict[str, Any]) -> Feed:
    feed_node = tree.get("feed")
    if not isinstance(feed_node, dict):
        raise FormatError("Invalid Atom format")

    items = []
    for index, entry in enumerate(_as_list(feed_node.get("entry"))):
        if not isinstance(entry, dict):
            continue

        link = _atom_link(entry.get("link"))
        raw_title = _text(entry.get("title"))
        summary = _text(entry.get("summary"))

        # updated wins over published
        published_at = (
            parse_date(_text(entry.get("updated")))
            or parse_date(_text(entry.get("published")))
            or _now()
        )

        items.append(Item(
            id=generate_item_id(_text(entry.get("id")) or link, raw_title, index),
            title=decode_entities(raw_title) or UNTITLED_ITEM,
            link=link,
            description=summary,
            content=_text(entry.get("content")) or summary,
            published_at=published_at,
            author=decode_entities(_atom_author(entry.get("author"))) or None,
        ))

    feed = Feed(
        title=decode_entities(_text(feed_node.get("title"))) or UNTITLED_FEED,
        description=decode_entities(_text(feed_node.get("subtitle"))),
        link=_atom_link(feed_node.get("link")),
        items=tuple(items),
    )
    logger.debug(f"Parsed Atom feed '{feed.title}' with {len(items)} entries")
    return feed


def _as_list(value: Any) -> List[Any]:
    """Coerce a repeated element to a list (single entries arrive unwrapped)."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text(value: Any) -> str:
    """Extract text from a scalar or an element with attributes."""
    if value is None:
        return ""
    if isinstance(value, dict):
        return str(value.get("#text", "")).strip()
    if isinstance(value, list):
        return _text(value[0]) if value else ""
    return str(value).strip()


def _atom_link(value: Any) -> str:
    """Pick the rel="alternate" link, falling back to the first one."""
    links = [link for link in _as_list(value) if isinstance(link, dict)]
    if not links:
        return _text(value)

    for link in links:
        if link.get("@rel") == "alternate":
            return link.get("@href", "")
    return links[0].get("@href", "")


def _atom_author(value: Any) -> str:
    authors = _as_list(value)
    if not authors:
        return ""
    author = authors[0]
    if isinstance(author, dict):
        return _text(author.get("name"))
    return _text(author)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(date_str: str) -> Optional[datetime]:
    """Parse a feed date.

    Args:
        date_str: RFC 822 (RSS) or ISO 8601 (Atom) date string

    Returns:
        Timezone-aware datetime if parsed successfully, None otherwise
    """
    if not date_str:
        return None

    parsed = None

    # Try RFC 2822 format (common in RSS)
    try:
        parsed = parsedate_to_datetime(date_str)
    except (ValueError, TypeError, IndexError):
        pass

    # Try ISO format
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
