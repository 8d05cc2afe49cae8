from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default

LEVEL_NAMES = {
    "WARNING": "WARN",
    "CRITICAL": "ERROR",
}


class LineFormatter(logging.Formatter):
    """`[2026-01-31T12:00:00+01:00] [INFO] message`"""

    def __init__(self) -> None:
        super().__init__(fmt="[%(asctime)s] [%(levelname)s] %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        return datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="seconds")

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        record.levelname = LEVEL_NAMES.get(original, original)
        try:
            return super().format(record)
        finally:
            record.levelname = original


def configure_logging(
    log_path: Optional[str] = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Configure logging.

    Notes:
    - Writing to /var/log needs root. If the requested path is not writable
      we fall back to a file in the working directory; if that fails too the
      run continues console-only.
    - log_path=None disables the file handler.

    Returns the actual file path being used (None when console-only).
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_devenv_configured", False):
        return getattr(logger, "_devenv_log_path", log_path)

    chosen_path: Optional[str] = None
    handlers: list[logging.Handler] = []
    fmt = LineFormatter()

    if log_path:
        for candidate in (log_path, str(Path.cwd() / "devenv-installer.log")):
            try:
                Path(os.path.dirname(candidate) or ".").mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(candidate)
            except OSError:
                continue
            file_handler.setFormatter(fmt)
            handlers.append(file_handler)
            chosen_path = candidate
            break

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_devenv_configured", True)
    setattr(logger, "_devenv_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
