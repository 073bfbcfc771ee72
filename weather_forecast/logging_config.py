"""
Logging setup for the weather CLI.

Diagnostics go to stderr so forecasts printed on stdout stay clean. A
rotating log file can be added (``LOG_FILE``); it always records with
timestamps and source locations.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s (%(filename)s:%(lineno)d) %(message)s"
LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 3
HANDLER_NAME = "weather_forecast"

# urllib3 logs every request line, query string and credential included.
QUIET_LOGGERS = ("urllib3",)


def parse_level(level: str | int) -> int:
    """Numeric level for a name such as ``"debug"``; unknown names mean WARNING."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(level: str | int = "WARNING", log_file: Path | str | None = None) -> logging.Logger:
    """
    Configure the root logger for one CLI run.

    Replaces any handlers installed by an earlier call.

    Args:
        level: Threshold for console and file output
        log_file: Also write to this rotating file (parent directories are created)

    Returns:
        The root logger
    """
    numeric_level = parse_level(level)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler.get_name() == HANDLER_NAME:
            handler.close()
    root.setLevel(numeric_level)

    console = logging.StreamHandler(sys.stderr)
    console.set_name(HANDLER_NAME)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.set_name(HANDLER_NAME)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module (typically ``__name__``)."""
    return logging.getLogger(name)
