"""Process-wide logging setup. Call configure_logging once at startup."""

import logging
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.config import Settings

# Parsed back by app.services.system_log; keep the timestamp a single token.
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"
LOG_FILENAME = "app.log"


def build_formatter() -> logging.Formatter:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    formatter.converter = time.gmtime
    return formatter


def configure_logging(settings: "Settings") -> None:
    """Install stderr (and optionally file) handlers on the root logger."""
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = build_formatter()
    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    root.addHandler(stream)

    if settings.LOG_TO_FILE:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
