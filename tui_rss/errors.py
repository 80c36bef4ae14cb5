"""Error types for tui_rss.

Every error here is non-fatal to the reader: the navigator catches them,
reports them to the user and stays in a valid view mode.
"""

from typing import Optional


class ReaderError(Exception):
    """Base class for reader errors."""


class FormatError(ReaderError):
    """Raised when a document is not a recognizable RSS or Atom feed."""


class HttpError(ReaderError):
    """Raised when a fetch does not complete with a success status.

    Attributes:
        status: HTTP status code, or None for transport-level failures
        detail: Human readable reason
    """

    def __init__(self, status: Optional[int], detail: str = ""):
        self.status = status
        self.detail = detail
        if status is None:
            message = detail or "request failed"
        else:
            message = f"HTTP {status}" + (f": {detail}" if detail else "")
        super().__init__(message)


class ValidationError(ReaderError):
    """Raised by the add-feed flow when the entered URL is not acceptable."""
