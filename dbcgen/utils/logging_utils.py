"""Logging setup for the dbcgen command-line tools."""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def parse_level(level: Union[int, str]) -> int:
    """Turn a level name such as 'debug' or a number into a logging level."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(console_level: Union[int, str] = logging.WARNING,
                  stream: Optional[object] = None,
                  replace_existing: bool = True) -> None:
    """Configure the root logger with a single console handler.

    Log records go to stderr by default so that generated documents written
    to stdout stay clean.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    if replace_existing:
        root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(parse_level(console_level))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
