"""Route procinspect's module loggers to stderr."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def resolve_level(name: str) -> int:
    """Map a level name such as 'debug' to its number; unknown names give WARNING."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(level: str = "WARNING") -> None:
    """
    Send log records to stderr at the given level name.

    stdout stays reserved for the Textual screen and the --once report.
    Does nothing if the root logger already has handlers.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logging.basicConfig(level=resolve_level(level), handlers=[handler])
