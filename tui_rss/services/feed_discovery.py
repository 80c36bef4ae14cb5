"""Feed discovery service.

This module finds the RSS/Atom feed advertised by an HTML page, so that a
blog homepage can be subscribed to directly.
"""

import logging
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Feed MIME types to look for in <link> tags
FEED_MIME_TYPES = [
    "application/rss+xml",
    "application/atom+xml",
    "application/xml",
    "text/xml",
]


def discover_feed_url(html: str, base_url: str) -> Optional[str]:
    """Find the feed URL advertised by a page.

    Looks for ``<link rel="alternate">`` elements with a feed MIME type and
    returns the first one, resolved against the page URL.

    Args:
        html: Page markup
        base_url: URL the page was fetched from

    Returns:
        Absolute feed URL if found, None otherwise
    """
    if not html or "<" not in html:
        return None

    soup = BeautifulSoup(html, "lxml")

    for link in soup.find_all("link", rel=lambda x: x and "alternate" in x):
        link_type = (link.get("type") or "").lower()
        href = (link.get("href") or "").strip()

        if href and any(mime in link_type for mime in FEED_MIME_TYPES):
            feed_url = urljoin(base_url, href)
            logger.info(f"Found feed via link tag: {feed_url}")
            return feed_url

    logger.info(f"No feed advertised by: {base_url}")
    return None
