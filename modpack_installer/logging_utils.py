from __future__ import annotations

import enum
import logging
import os
from pathlib import Path
from typing import Optional

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_RESET = "\033[0m"
_BOLD = "\033[1m"
_COLORS = {
    logging.CRITICAL: "\033[31m",
    logging.ERROR: "\033[91m",
    logging.WARNING: "\033[33m",
    SUCCESS: "\033[32m",
    logging.INFO: "\033[34m",
    logging.DEBUG: "\033[90m",
}


class Severity(enum.Enum):
    """Closed set of severities the installer reports with."""

    CRITICAL = logging.CRITICAL
    ERROR = logging.ERROR
    INFO = logging.INFO
    SUCCESS = SUCCESS


def report(severity: Severity, message: str, *, logger: Optional[logging.Logger] = None) -> None:
    """Emit a user-facing message.

    Reporting never terminates the process; callers decide what CRITICAL means.
    """

    (logger or logging.getLogger("modpack_installer")).log(severity.value, message)


class ConsoleFormatter(logging.Formatter):
    """Colour the whole message by level, like a terminal reporter."""

    def __init__(self, use_color: bool = True):
        super().__init__(fmt="%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if not self.use_color:
            return msg
        color = _COLORS.get(record.levelno, "")
        if record.levelno >= logging.CRITICAL:
            color = _BOLD + color
        return f"{color}{msg}{_RESET}"


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Configure logging.

    Console output is short and coloured; the optional log file gets full
    timestamped records. Calling this more than once is a no-op.

    Returns the log file path in use, if any.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_modpack_configured", False):
        return getattr(logger, "_modpack_log_path", log_path)

    handlers: list[logging.Handler] = []

    if log_path:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )
        handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        stream = getattr(console.stream, "isatty", None)
        console.setFormatter(ConsoleFormatter(use_color=bool(stream and stream())))
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_modpack_configured", True)
    setattr(logger, "_modpack_log_path", log_path)

    logging.getLogger(__name__).debug("Logging initialized (log_path=%s)", log_path)
    return log_path
