"""Logging setup for command-line entry points.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are attached here, once, by whichever script runs.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "src"


def configure_logging(level: str | int = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    """Attach stdout (and optionally file) handlers to the package logger."""

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    # Prevent duplicate handlers if called more than once
    if not logger.handlers:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(stream_handler)

        if log_file is not None:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            logger.addHandler(file_handler)

    logger.propagate = False
    return logger
