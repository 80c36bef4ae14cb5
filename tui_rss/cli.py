"""Command line entry point for tui_rss."""

import asyncio
import sys
from typing import Optional

import click

from tui_rss.config import load_config, set_config
from tui_rss.logging_config import logger, setup_logging
from tui_rss.storage import close_database, get_database
from tui_rss.ui.app import ReaderApp


async def _open_store() -> None:
    """Create (and on first run, seed) the database, then release it."""
    await get_database()
    await close_database()


@click.command()
@click.option(
    "--db-path",
    default=None,
    help="SQLite database location (overrides TUI_RSS_DB_PATH)"
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level for the log file (overrides TUI_RSS_LOG_LEVEL)"
)
def main(db_path: Optional[str], log_level: Optional[str]) -> None:
    """Read RSS and Atom feeds in the terminal."""
    config = load_config(db_path=db_path, log_level=log_level)
    set_config(config)
    setup_logging(config)
    logger.info(f"Starting tui-rss with database {config.db_path}")

    # Without a store there is nothing to show
    try:
        asyncio.run(_open_store())
    except Exception as e:
        logger.error(f"Failed to open database: {e}", exc_info=True)
        click.echo(f"Error: could not open database at {config.db_path}: {e}", err=True)
        sys.exit(1)

    try:
        ReaderApp().run()
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    logger.info("Exited")


if __name__ == "__main__":
    main()
