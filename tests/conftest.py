"""Shared fixtures for tui_rss tests."""

import aiosqlite
import pytest
from unittest.mock import AsyncMock, patch

from tui_rss.storage.database import init_database


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def in_memory_db():
    """Create a seeded in-memory database for testing."""
    db = await aiosqlite.connect(":memory:")
    db.row_factory = aiosqlite.Row
    await init_database(db)

    # Patch get_database to return our in-memory connection
    with patch("tui_rss.storage.database.get_database", AsyncMock(return_value=db)):
        yield db

    await db.close()


@pytest.fixture
async def empty_db():
    """Create an in-memory database without the default feeds."""
    db = await aiosqlite.connect(":memory:")
    db.row_factory = aiosqlite.Row
    await init_database(db, seed=False)

    with patch("tui_rss.storage.database.get_database", AsyncMock(return_value=db)):
        yield db

    await db.close()


RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
    <channel>
        <title>Example Blog</title>
        <link>https://example.com</link>
        <description>Posts about things</description>
        <item>
            <title>First Post</title>
            <link>https://example.com/first</link>
            <description>&lt;p&gt;First summary&lt;/p&gt;</description>
            <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
        </item>
        <item>
            <title>Second Post</title>
            <link>https://example.com/second</link>
            <description>Second summary</description>
            <content:encoded><![CDATA[<p>Second <b>full</b> body</p>]]></content:encoded>
        </item>
        <item>
            <title>Third Post</title>
            <link>https://example.com/third</link>
            <description>Third summary</description>
        </item>
    </channel>
</rss>
"""

ARTICLE_PAGE = """<html>
<head>
    <title>Page</title>
    <meta name="author" content="Jane Doe">
    <meta property="og:site_name" content="Example Site">
</head>
<body>
    <nav><a href="/">Home</a> <a href="/about">About</a></nav>
    <div class="content">
        <p>The first paragraph of the article explains what happened, where, and why it matters to readers.</p>
        <p>The second paragraph adds more detail, with numbers, quotes, and other supporting context for the story.</p>
    </div>
    <footer>Copyright Example Site</footer>
</body>
</html>
"""


@pytest.fixture
def rss_feed():
    return RSS_FEED


@pytest.fixture
def article_page():
    return ARTICLE_PAGE
