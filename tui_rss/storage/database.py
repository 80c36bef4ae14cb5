"""Database storage for tui_rss.

This module provides async SQLite operations for feed subscriptions and
favorite articles.
Database location: ~/.tui-rss/rss-reader.db (or TUI_RSS_DB_PATH env var)
"""

from pathlib import Path
from typing import List, Optional, Set

import aiosqlite

from tui_rss.config import get_config
from tui_rss.models.schemas import FavoriteRecord, FeedSource

# Seeded on first run only
DEFAULT_FEEDS = [
    FeedSource(id="hn", name="Hacker News", url="https://hnrss.org/frontpage"),
    FeedSource(id="bbc", name="BBC News", url="http://feeds.bbci.co.uk/news/rss.xml"),
    FeedSource(id="techcrunch", name="TechCrunch", url="https://techcrunch.com/feed/"),
]

# PRAGMA user_version value once the defaults have been written
SCHEMA_SEEDED = 1


def _get_db_path() -> Path:
    """Get the database path from the active configuration."""
    return get_config().db_path


# Singleton connection
_db_connection: Optional[aiosqlite.Connection] = None


async def get_database() -> aiosqlite.Connection:
    """Get or create a singleton database connection.

    Returns:
        Active database connection
    """
    global _db_connection

    if _db_connection is None:
        db_path = _get_db_path()
        # Ensure directory exists
        db_path.parent.mkdir(parents=True, exist_ok=True)

        _db_connection = await aiosqlite.connect(db_path)
        _db_connection.row_factory = aiosqlite.Row
        await init_database(_db_connection)

    return _db_connection


async def init_database(db: Optional[aiosqlite.Connection] = None, seed: bool = True) -> None:
    """Initialize database tables if they don't exist.

    Args:
        db: Optional database connection (uses singleton if not provided)
        seed: Whether to insert the default feeds on a fresh database
    """
    if db is None:
        db = await get_database()

    await db.execute("""
        CREATE TABLE IF NOT EXISTS feeds (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            url TEXT NOT NULL UNIQUE,
            created_at INTEGER DEFAULT (strftime('%s', 'now'))
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS favorites (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            article_id TEXT NOT NULL UNIQUE,
            article_title TEXT NOT NULL,
            article_link TEXT NOT NULL,
            feed_name TEXT,
            saved_at INTEGER DEFAULT (strftime('%s', 'now'))
        )
    """)

    # Create index for faster lookups
    await db.execute("""
        CREATE INDEX IF NOT EXISTS idx_favorites_article_id ON favorites(article_id)
    """)

    cursor = await db.execute("PRAGMA user_version")
    row = await cursor.fetchone()
    if seed and row[0] < SCHEMA_SEEDED:
        await db.executemany(
            "INSERT OR IGNORE INTO feeds (id, name, url) VALUES (?, ?, ?)",
            [(f.id, f.name, f.url) for f in DEFAULT_FEEDS],
        )
        await db.execute(f"PRAGMA user_version = {SCHEMA_SEEDED}")

    await db.commit()


async def list_feed_sources() -> List[FeedSource]:
    """List subscribed feeds in the order they were added.

    Returns:
        List of FeedSource objects
    """
    db = await get_database()

    cursor = await db.execute("SELECT id, name, url FROM feeds ORDER BY created_at, rowid")

    sources = []
    async for row in cursor:
        sources.append(FeedSource(id=row["id"], name=row["name"], url=row["url"]))

    return sources


async def add_feed_source(source: FeedSource) -> bool:
    """Add a feed subscription. Duplicate ids or URLs are ignored.

    Args:
        source: Feed to add

    Returns:
        True if a row was inserted
    """
    db = await get_database()

    cursor = await db.execute(
        "INSERT OR IGNORE INTO feeds (id, name, url) VALUES (?, ?, ?)",
        (source.id, source.name, source.url),
    )
    await db.commit()
    return cursor.rowcount > 0


async def remove_feed_source(feed_id: str) -> bool:
    """Remove a feed subscription.

    Args:
        feed_id: Id of the feed to remove

    Returns:
        True if the feed existed
    """
    db = await get_database()

    cursor = await db.execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
    await db.commit()
    return cursor.rowcount > 0


async def rename_feed_source(feed_id: str, name: str) -> bool:
    """Change the display name of a feed.

    Args:
        feed_id: Id of the feed
        name: New display name

    Returns:
        True if the feed existed
    """
    db = await get_database()

    cursor = await db.execute("UPDATE feeds SET name = ? WHERE id = ?", (name, feed_id))
    await db.commit()
    return cursor.rowcount > 0


async def list_favorites() -> List[FavoriteRecord]:
    """List favorite articles, most recently saved first.

    Returns:
        List of FavoriteRecord objects
    """
    db = await get_database()

    cursor = await db.execute("""
        SELECT article_id, article_title, article_link, feed_name
        FROM favorites
        ORDER BY saved_at DESC, id DESC
    """)

    favorites = []
    async for row in cursor:
        favorites.append(FavoriteRecord(
            article_id=row["article_id"],
            title=row["article_title"],
            link=row["article_link"],
            feed_name=row["feed_name"] or None,
        ))

    return favorites


async def list_favorite_ids() -> Set[str]:
    """Get the ids of all favorite articles."""
    db = await get_database()

    cursor = await db.execute("SELECT article_id FROM favorites")

    ids = set()
    async for row in cursor:
        ids.add(row["article_id"])

    return ids


async def is_favorite(article_id: str) -> bool:
    """Check whether an article is a favorite."""
    db = await get_database()

    cursor = await db.execute(
        "SELECT 1 FROM favorites WHERE article_id = ? LIMIT 1", (article_id,)
    )
    return await cursor.fetchone() is not None


async def add_favorite(
    article_id: str,
    title: str,
    link: str,
    feed_name: Optional[str] = None,
) -> None:
    """Save an article as a favorite. Saving it twice is a no-op.

    Args:
        article_id: Canonical item id
        title: Article title
        link: Article URL
        feed_name: Title of the feed the article came from
    """
    db = await get_database()

    await db.execute(
        """
        INSERT OR IGNORE INTO favorites (article_id, article_title, article_link, feed_name)
        VALUES (?, ?, ?, ?)
        """,
        (article_id, title, link, feed_name),
    )
    await db.commit()


async def remove_favorite(article_id: str) -> bool:
    """Remove an article from the favorites.

    Returns:
        True if the article was a favorite
    """
    db = await get_database()

    cursor = await db.execute("DELETE FROM favorites WHERE article_id = ?", (article_id,))
    await db.commit()
    return cursor.rowcount > 0


async def toggle_favorite(
    article_id: str,
    title: str,
    link: str,
    feed_name: Optional[str] = None,
) -> bool:
    """Flip the favorite state of an article.

    Returns:
        The new state: True if the article is now a favorite
    """
    if await is_favorite(article_id):
        await remove_favorite(article_id)
        return False

    await add_favorite(article_id, title, link, feed_name)
    return True


async def close_database() -> None:
    """Close the database connection."""
    global _db_connection

    if _db_connection is not None:
        await _db_connection.close()
        _db_connection = None
