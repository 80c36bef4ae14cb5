"""Network fetch service.

This module retrieves feed XML and webpage HTML over HTTP. Requests carry no
client-side timeout and are never retried; failures surface once as HttpError.
"""

import logging
from typing import Awaitable, Callable

import httpx

from tui_rss.config import get_config
from tui_rss.errors import HttpError
from tui_rss.models.schemas import Feed
from tui_rss.services.feed_parser import parse_feed
from tui_rss.services.xml_tree import build_tree

logger = logging.getLogger(__name__)


async def fetch_text(url: str) -> str:
    """Fetch a document and return its decoded text.

    Args:
        url: Absolute http(s) URL

    Returns:
        Response body as text

    Raises:
        HttpError: On a non-success status, a transport failure or an unusable URL
    """
    logger.info(f"Fetching: {url}")

    async with httpx.AsyncClient(
        follow_redirects=True,
        timeout=None,
        headers={"User-Agent": get_config().user_agent},
    ) as client:
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise HttpError(None, str(e) or type(e).__name__) from e
        except (httpx.InvalidURL, ValueError) as e:
            # Malformed hosts fail while the request is built
            logger.error(f"Cannot request {url}: {e}")
            raise HttpError(None, f"Invalid URL: {e}") from e

    if not response.is_success:
        logger.warning(f"Fetch of {url} returned HTTP {response.status_code}")
        raise HttpError(response.status_code, response.reason_phrase)

    return response.text


async def load_feed(url: str, fetch: Callable[[str], Awaitable[str]] = fetch_text) -> Feed:
    """Fetch and normalize a feed.

    Args:
        url: Feed URL
        fetch: Coroutine function returning a document's text

    Returns:
        Parsed Feed

    Raises:
        HttpError: If the feed cannot be fetched
        FormatError: If the document is not RSS or Atom
    """
    xml_text = await fetch(url)
    return parse_feed(build_tree(xml_text))
