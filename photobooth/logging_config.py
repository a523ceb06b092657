"""Central logging configuration (stdlib logging only)."""
from __future__ import annotations

import logging
import os
import sys


def setup_logging(level: str | int | None = None) -> None:
    """Configure root logging.

    - level: "INFO"/"DEBUG" or logging level int. Defaults to env LOG_LEVEL or INFO.
    """
    lvl = level if level is not None else os.getenv("LOG_LEVEL", "INFO")
    if isinstance(lvl, str):
        lvl = getattr(logging, lvl.upper(), logging.INFO)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(lvl)

    # PIL пишет отладку декодеров PNG на DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)
