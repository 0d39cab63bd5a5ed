"""Logging configuration - one stream handler on the root logger."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Install the application log handler once.

    Safe to call repeatedly; later calls only adjust the level.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(getattr(h, "_localiz", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._localiz = True  # type: ignore[attr-defined]
    root.addHandler(handler)
