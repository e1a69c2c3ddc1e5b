from __future__ import annotations

import logging
import logging.handlers
import os
from typing import Optional


def setup_logging(level: str = "INFO", log_file: Optional[str] = None,
                  max_size_mb: int = 5, backup_count: int = 2) -> logging.Logger:
    """Console logging for the runtime scripts, plus an optional rotating file."""
    console_format = "%(asctime)s  %(levelname)-5s  %(name)s: %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-32s | %(message)s"
    date_format = "%H:%M:%S"

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_size_mb * 1024 * 1024, backupCount=backup_count,
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root.addHandler(fh)

    return root
