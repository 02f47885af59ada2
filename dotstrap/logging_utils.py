from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional


class ConsoleFormatter(logging.Formatter):
    """``[INFO] message`` lines for interactive output."""

    def format(self, record: logging.LogRecord) -> str:
        return f"[{record.levelname}] {record.getMessage()}"


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
) -> Optional[str]:
    """Configure logging.

    Console output is always on. A file log is
    only written when log_path is given; if that location is not writable we
    fall back to a file in the working directory.

    Returns the actual file path being used, or None.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_dotstrap_configured", False):
        return getattr(logger, "_dotstrap_log_path", log_path)

    chosen_path: Optional[str] = None
    handlers: list[logging.Handler] = []

    if log_path:
        fmt = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        try:
            Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
            file_handler: logging.Handler = logging.FileHandler(log_path)
            chosen_path = log_path
        except OSError:
            # Fall back to a writable location.
            fallback = str(Path.cwd() / "dotstrap.log")
            file_handler = logging.FileHandler(fallback)
            chosen_path = fallback
        file_handler.setFormatter(fmt)
        handlers.append(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ConsoleFormatter())
    handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_dotstrap_configured", True)
    setattr(logger, "_dotstrap_log_path", chosen_path)

    if chosen_path:
        logging.getLogger(__name__).debug(
            "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
        )
    return chosen_path
