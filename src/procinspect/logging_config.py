"""
Logging configuration for the procinspect command line.

Log records go to stderr so that the report printed on stdout stays
machine-readable. While the Textual viewer owns the terminal they go to
Textual's own log instead.
"""

import logging
import sys

from textual.logging import TextualHandler


def setup_logging(level: str = "WARNING", textual: bool = False) -> None:
    """
    Configure root logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        textual: Send records to the Textual log rather than stderr

    Log Format:
        YYYY-MM-DD HH:MM:SS [LEVEL] logger.name: Message
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    handler = TextualHandler() if textual else logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )
