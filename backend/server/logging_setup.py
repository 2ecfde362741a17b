"""Logging setup for the image previewer server."""

import logging
import sys

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_log_level(name: str) -> int:
    """Map a config level name to a logging level. Unknown names -> INFO."""
    return LOG_LEVELS.get((name or "").strip().lower(), logging.INFO)


def setup_logging(level_name: str) -> None:
    logging.basicConfig(
        level=get_log_level(level_name),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
