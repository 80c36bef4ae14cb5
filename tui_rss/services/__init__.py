"""Services for tui_rss."""

from .entities import decode_entities
from .feed_discovery import discover_feed_url
from .feed_parser import generate_item_id, parse_feed
from .feed_validator import check_feed_url, generate_feed_id, validate_feed_url
from .fetcher import fetch_text, load_feed
from .xml_tree import build_tree

__all__ = [
    "build_tree",
    "check_feed_url",
    "decode_entities",
    "discover_feed_url",
    "fetch_text",
    "generate_feed_id",
    "generate_item_id",
    "load_feed",
    "parse_feed",
    "validate_feed_url",
]
