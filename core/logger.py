# Path: core/logger.py
# Purpose: Centralize logger construction for core services, API, and scripts.
# Layer: core.
# Details: Console output always; size-rotated file output when a log directory is configured.

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT_NAME = "imgsearch"


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> logging.Logger:
    """Attach handlers to the package root logger once and set its level.

    Child loggers returned by :func:`get_logger` propagate to this root, so calling
    this again only adjusts the level.
    """

    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(level)
    # Prevent duplicate emission via the interpreter root or uvicorn loggers.
    root.propagate = False

    if not root.handlers:
        formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_dir / "imgsearch.log",
                maxBytes=10_000_000,  # 10MB
                backupCount=5,
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    for handler in root.handlers:
        handler.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package root, e.g. ``imgsearch.search.pipeline``."""

    return logging.getLogger(f"{_ROOT_NAME}.{name}")
