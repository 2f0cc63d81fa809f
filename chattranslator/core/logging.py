"""
Logging utilities for the request handlers and the chat session.

Provides a consistent logging format and configuration.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # pydle logs every raw IRC line at INFO.
    logging.getLogger("pydle").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
