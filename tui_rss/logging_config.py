"""Logging setup for tui_rss.

The terminal is owned by the UI while the reader runs, so log records go to
a file instead of stderr.
"""

import logging
from typing import Optional

from tui_rss.config import ReaderConfig, get_config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

logger = logging.getLogger("tui_rss")

# Third-party loggers that emit while the UI owns the terminal
LIBRARY_LOGGERS = ("httpx", "trafilatura", "htmldate")


def setup_logging(config: Optional[ReaderConfig] = None) -> logging.Logger:
    """Attach a file handler to the package logger.

    Args:
        config: Reader configuration (uses the active one if not provided)

    Returns:
        The configured package logger
    """
    if config is None:
        config = get_config()

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Re-running setup must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    config.log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    for name in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers = [handler]
        library_logger.setLevel(max(level, logging.WARNING))
        library_logger.propagate = False

    return logger
