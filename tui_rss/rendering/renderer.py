"""Article and webpage rendering for the terminal.

Both entry points are pure, deterministic and memoized, and never raise:
any internal failure degrades to a fixed message.
"""

import logging
import math
import re
from functools import lru_cache
from typing import List

from tui_rss.rendering.extractor import PageMetadata, extract_content, extract_metadata
from tui_rss.rendering.text import WRAP_WIDTH, html_to_text, parse_html

logger = logging.getLogger(__name__)

NO_CONTENT = "No content available."
NO_READABLE_CONTENT = "Could not extract readable content from this page."
SUMMARY_FAILED = "Failed to render article content."
WEBPAGE_FAILED = "Failed to render webpage content."

WORDS_PER_MINUTE = 200
RULE = "─" * 40

_BARE_URL_RE = re.compile(r"^(?:https?://|www\.)\S*$", re.IGNORECASE)
_BRACKET_RE = re.compile(r"^\[.*\]$")
_SOCIAL_RE = re.compile(
    r"^(?:share|tweet|post|pin|email|submit|facebook|twitter|linkedin)",
    re.IGNORECASE,
)
_PUNCTUATION_RE = re.compile(r"^[•·\-–—|/\\*\s]+$")
_LIST_MARKER_RE = re.compile(r"^(?:[•·\-–—*]|\d+\.)\s+")


@lru_cache(maxsize=128)
def render_summary(html: str) -> str:
    """Render an article body from a feed.

    Args:
        html: Article HTML (content or description)

    Returns:
        Wrapped plain text
    """
    if not html or not html.strip():
        return NO_CONTENT

    try:
        soup = parse_html(html)
        text = html_to_text([soup.body or soup], width=WRAP_WIDTH)
    except Exception as e:
        logger.error(f"Failed to render article content: {e}", exc_info=True)
        return SUMMARY_FAILED

    return text or NO_CONTENT


@lru_cache(maxsize=32)
def render_webpage(html: str) -> str:
    """Render a full webpage, keeping only its main content.

    Args:
        html: Page HTML as fetched

    Returns:
        Metadata header (when the page carries any) followed by the wrapped
        article text
    """
    if not html or not html.strip():
        return NO_CONTENT

    try:
        metadata = extract_metadata(html)
        content = extract_content(html)
        body = filter_noise(_content_text(content)) if content else ""
    except Exception as e:
        logger.error(f"Failed to render webpage content: {e}", exc_info=True)
        return WEBPAGE_FAILED

    if not body:
        return NO_READABLE_CONTENT

    header = metadata_header(metadata, reading_minutes(body))
    return "\n".join(header + [body])


def _content_text(content: str) -> str:
    soup = parse_html(content)
    return html_to_text([soup.body or soup], width=WRAP_WIDTH)


def reading_minutes(text: str) -> int:
    """Estimated reading time at 200 words per minute, rounded up."""
    return math.ceil(len(text.split()) / WORDS_PER_MINUTE)


def metadata_header(metadata: PageMetadata, minutes: int) -> List[str]:
    """Header lines for a rendered webpage.

    Empty when the page provides no byline, date or site name.
    """
    if metadata.is_empty:
        return []

    lines = []
    if metadata.byline:
        lines.append(f"By {metadata.byline}")
    if metadata.published_at:
        published = metadata.published_at
        lines.append(f"{published:%B} {published.day}, {published.year}")
    if metadata.site_name:
        lines.append(metadata.site_name)
    if minutes:
        lines.append(f"{minutes} min read")
    lines.append(RULE)
    lines.append("")
    return lines


def filter_noise(text: str) -> str:
    """Drop link, share and placeholder lines left over from page chrome.

    Runs of blank lines collapse to a single blank line.
    """
    kept: List[str] = []
    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            if kept and kept[-1] != "":
                kept.append("")
            continue
        if _is_noise(trimmed):
            continue
        kept.append(line)

    return "\n".join(kept).strip("\n")


def _is_noise(trimmed: str) -> bool:
    core = _LIST_MARKER_RE.sub("", trimmed)
    if _BARE_URL_RE.match(trimmed) or _BARE_URL_RE.match(core):
        return True
    if "%2F" in trimmed or "%3A" in trimmed:
        return True
    if _BRACKET_RE.match(trimmed) or _BRACKET_RE.match(core):
        return True
    if _SOCIAL_RE.match(core):
        return True
    if _PUNCTUATION_RE.match(trimmed):
        return True
    # Single stray symbols
    return len(trimmed) <= 2 and not trimmed[0].isalnum()
