"""Configuration for tui_rss.

Values come from environment variables, with CLI options layered on top:

- TUI_RSS_DB_PATH: SQLite database location (default ~/.tui-rss/rss-reader.db)
- TUI_RSS_LOG_LEVEL: logging level name (default INFO)
- TUI_RSS_LOG_PATH: log file location (default ~/.tui-rss/tui-rss.log)
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

APP_DIR = Path.home() / ".tui-rss"

DEFAULT_USER_AGENT = "TuiRSS/1.0 (Terminal Feed Reader)"


@dataclass(frozen=True)
class ReaderConfig:
    """Runtime configuration for the reader."""

    name: str = "tui_rss"
    db_path: Path = APP_DIR / "rss-reader.db"
    log_level: str = "INFO"
    log_path: Path = APP_DIR / "tui-rss.log"
    user_agent: str = DEFAULT_USER_AGENT


def load_config(
    db_path: Optional[str] = None,
    log_level: Optional[str] = None,
) -> ReaderConfig:
    """Build a configuration from the environment and optional overrides.

    Args:
        db_path: Database path overriding TUI_RSS_DB_PATH
        log_level: Log level overriding TUI_RSS_LOG_LEVEL

    Returns:
        ReaderConfig instance
    """
    config = ReaderConfig()

    env_db = os.environ.get("TUI_RSS_DB_PATH")
    if env_db:
        config = replace(config, db_path=Path(env_db))

    env_level = os.environ.get("TUI_RSS_LOG_LEVEL")
    if env_level:
        config = replace(config, log_level=env_level.upper())

    env_log = os.environ.get("TUI_RSS_LOG_PATH")
    if env_log:
        config = replace(config, log_path=Path(env_log))

    if db_path:
        config = replace(config, db_path=Path(db_path).expanduser())
    if log_level:
        config = replace(config, log_level=log_level.upper())

    return config


_config: Optional[ReaderConfig] = None


def get_config() -> ReaderConfig:
    """Get the active configuration, loading it from the environment once."""
    global _config

    if _config is None:
        _config = load_config()
    return _config


def set_config(config: ReaderConfig) -> None:
    """Replace the active configuration (used by the CLI after parsing options)."""
    global _config
    _config = config
