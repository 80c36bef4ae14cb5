"""Main-content extraction for full webpages.

trafilatura does the heavy lifting: it drops navigation, comments and other
boilerplate and returns the article as simplified HTML, which the text
renderer then lays out for the terminal.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from trafilatura import extract
from trafilatura.metadata import extract_metadata as read_metadata

from tui_rss.services.feed_parser import parse_date

logger = logging.getLogger(__name__)

# Longer values are whole author boxes, not names
MAX_BYLINE_LENGTH = 100


@dataclass(frozen=True)
class PageMetadata:
    """Article metadata found in a page's markup."""

    byline: Optional[str] = None
    published_at: Optional[datetime] = None
    site_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.byline or self.published_at or self.site_name)


def extract_metadata(html: str) -> PageMetadata:
    """Read byline, publication date and site name from a page.

    Args:
        html: Page HTML as fetched

    Returns:
        PageMetadata with whatever the page declares
    """
    document = read_metadata(html)
    if document is None:
        return PageMetadata()

    byline = (document.author or "").strip() or None
    if byline and (len(byline) > MAX_BYLINE_LENGTH or byline.startswith(("http://", "https://"))):
        byline = None

    return PageMetadata(
        byline=byline,
        published_at=parse_date(document.date) if document.date else None,
        site_name=(document.sitename or "").strip() or None,
    )


def extract_content(html: str) -> Optional[str]:
    """Isolate the main content of a page.

    Args:
        html: Page HTML as fetched

    Returns:
        Article body as simplified HTML, or None when the page has no
        readable content
    """
    content = extract(
        html,
        output_format="html",
        include_comments=False,
        include_tables=True,
        include_images=False,
        include_links=False,
        favor_recall=True,
    )
    if not content:
        logger.debug("No main content found in page")
        return None
    return content
