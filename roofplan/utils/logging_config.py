"""
Logging setup for roofplan.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
setup_logging() once per invocation. Records can carry scene or proposal
context through ``extra``:

    logger.debug("Hiding segment", extra={"segment_id": 3})

On the console the context is appended in brackets. The optional log file
gets one JSON object per record, so runs can be grepped or loaded later.

Environment:
    ROOFPLAN_LOG_LEVEL  default level when none is passed (INFO)
    ROOFPLAN_LOG_DIR    directory for dated log files (logs/)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

LOG_LEVEL_ENV = "ROOFPLAN_LOG_LEVEL"
LOG_DIR_ENV = "ROOFPLAN_LOG_DIR"

CONTEXT_KEYS = ("segment_id", "panel_id", "raster", "strategy", "error_type")

# Chatty at DEBUG/INFO while opening rasters and building transformers
QUIET_LOGGERS = ("rasterio", "pyproj", "shapely")

LEVEL_COLOURS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
RESET = "\033[0m"


def record_context(record: logging.LogRecord) -> dict:
    """Context keys present on a record, in CONTEXT_KEYS order."""
    return {key: getattr(record, key) for key in CONTEXT_KEYS if hasattr(record, key)}


class ConsoleFormatter(logging.Formatter):
    """One line per record. Only the level name is coloured."""

    def __init__(self, colour: bool = False):
        super().__init__(datefmt="%H:%M:%S")
        self.colour = colour

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<8}"
        if self.colour:
            level = f"{LEVEL_COLOURS.get(record.levelno, '')}{level}{RESET}"

        line = f"{self.formatTime(record, self.datefmt)} {level} {record.name}: {record.getMessage()}"
        context = record_context(record)
        if context:
            line += " [" + ", ".join(f"{key}={value}" for key, value in context.items()) + "]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class JsonLinesFormatter(logging.Formatter):
    """A JSON object per record with UTC timestamp, level, logger, message and context."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def resolve_level(level: Optional[str]) -> int:
    """Numeric level for a name; unknown names fall back to INFO."""
    name = (level or os.environ.get(LOG_LEVEL_ENV, "INFO")).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def default_log_file() -> Path:
    log_dir = Path(os.environ.get(LOG_DIR_ENV, "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"roofplan_{datetime.now().strftime('%Y%m%d')}.log"


def setup_logging(
    level: Optional[str] = None,
    log_to_file: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """
    Configure the root logger, replacing any handlers it already has.

    Args:
        level: Console level name; ROOFPLAN_LOG_LEVEL when omitted
        log_to_file: Also write JSON lines to a file (always at DEBUG)
        log_file: File path; a dated file under ROOFPLAN_LOG_DIR by default

    Returns:
        Path of the log file, or None when logging to the console only
    """
    numeric = resolve_level(level)
    root = logging.getLogger()

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter(colour=sys.stderr.isatty()))
    console.setLevel(numeric)
    root.addHandler(console)

    path = None
    if log_to_file:
        path = Path(log_file) if log_file is not None else default_log_file()
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(JsonLinesFormatter())
        file_handler.setLevel(logging.DEBUG)
        root.addHandler(file_handler)

    root.setLevel(logging.DEBUG if log_to_file else numeric)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return path
