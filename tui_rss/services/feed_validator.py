"""Feed URL validation for the add-feed flow."""

import logging
import re
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional
from urllib.parse import urlsplit

from tui_rss.errors import FormatError, HttpError, ValidationError
from tui_rss.services.feed_discovery import discover_feed_url
from tui_rss.services.feed_parser import parse_feed
from tui_rss.services.xml_tree import build_tree

logger = logging.getLogger(__name__)

FetchText = Callable[[str], Awaitable[str]]

EMPTY_URL = "URL cannot be empty"
INVALID_URL = "Invalid URL format"
BAD_SCHEME = "URL must start with http:// or https://"
DUPLICATE_URL = "Feed already added"
UNPARSEABLE = "Could not parse RSS feed"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


@dataclass(frozen=True)
class ValidatedFeed:
    """A feed that fetched and parsed successfully."""

    url: str
    title: str
    description: str


def check_feed_url(url: str, existing_urls: Iterable[str] = ()) -> str:
    """Validate a URL before anything is fetched.

    Args:
        url: User input
        existing_urls: URLs already subscribed to

    Returns:
        The trimmed URL

    Raises:
        ValidationError: With the message shown in the add-feed dialog
    """
    url = (url or "").strip()
    if not url:
        raise ValidationError(EMPTY_URL)

    if any(ch.isspace() for ch in url):
        raise ValidationError(INVALID_URL)

    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise ValidationError(INVALID_URL) from e

    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        raise ValidationError(INVALID_URL)

    scheme = parts.scheme.lower()
    if scheme in ("http", "https") and not parts.netloc:
        raise ValidationError(INVALID_URL)

    if scheme not in ("http", "https"):
        raise ValidationError(BAD_SCHEME)

    if url in set(existing_urls):
        raise ValidationError(DUPLICATE_URL)

    return url


async def validate_feed_url(url: str, fetch_text: FetchText) -> ValidatedFeed:
    """Fetch and parse a candidate feed.

    When the URL serves an HTML page that advertises a feed, the advertised
    feed is validated instead (one hop only).

    Args:
        url: URL already accepted by ``check_feed_url``
        fetch_text: Fetch collaborator

    Returns:
        ValidatedFeed with the URL that actually serves the feed

    Raises:
        ValidationError: If the document cannot be fetched or parsed
    """
    document = await _fetch(url, fetch_text)
    try:
        feed = parse_feed(build_tree(document))
    except FormatError as e:
        discovered = discover_feed_url(document, url)
        if not discovered or discovered == url:
            logger.info(f"Rejected {url}: {e}")
            raise ValidationError(UNPARSEABLE) from e

        url = discovered
        document = await _fetch(url, fetch_text)
        try:
            feed = parse_feed(build_tree(document))
        except FormatError as inner:
            logger.info(f"Rejected discovered feed {url}: {inner}")
            raise ValidationError(UNPARSEABLE) from inner

    if not feed.title:
        raise ValidationError(UNPARSEABLE)

    logger.info(f"Validated feed '{feed.title}' at {url}")
    return ValidatedFeed(url=url, title=feed.title, description=feed.description)


async def _fetch(url: str, fetch_text: FetchText) -> str:
    try:
        return await fetch_text(url)
    except HttpError as e:
        raise ValidationError(f"Failed to fetch feed: {e}") from e


def generate_feed_id(url: str, now: Optional[float] = None) -> str:
    """Generate an id from the feed hostname and the creation time.

    Args:
        url: Feed URL
        now: Timestamp in seconds (defaults to the current time)

    Returns:
        Id such as ``example-lq3k9z1a``
    """
    if now is None:
        now = time.time()
    timestamp = _base36(int(now * 1000))

    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError:
        hostname = ""

    base = re.sub(r"^www\.", "", hostname).split(".")[0]
    if not base:
        return f"feed-{timestamp}"
    return f"{base}-{timestamp}"


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))
