from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_LOG_PATH = "~/.local/state/workstation-setup/setup.log"

_FILE_FORMAT = logging.Formatter(
    fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)

_RESET = "\033[0m"
_LEVEL_TAGS = {
    logging.DEBUG: ("[DEBUG]", "\033[2m"),
    logging.INFO: ("[INFO]", "\033[1;34m"),
    logging.WARNING: ("[WARN]", "\033[1;33m"),
    logging.ERROR: ("[ERROR]", "\033[1;31m"),
    logging.CRITICAL: ("[ERROR]", "\033[1;31m"),
}


def supports_color(stream=None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    return bool(getattr(stream, "isatty", None) and stream.isatty())


class ConsoleFormatter(logging.Formatter):
    """Short `[LEVEL] message` lines, colored when the stream is a terminal."""

    def __init__(self, color: bool = False) -> None:
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag, color = _LEVEL_TAGS.get(record.levelno, ("[INFO]", ""))
        message = record.getMessage()
        if record.exc_info and record.levelno >= logging.ERROR:
            message = message + "\n" + self.formatException(record.exc_info)
        if self.color and color:
            tag = f"{color}{tag}{_RESET}"
        return f"{tag} {message}"


class PendingLogHandler(logging.handlers.BufferingHandler):
    """Holds records in memory until `open_log_file()` picks a file for them."""

    def __init__(self, path: str) -> None:
        super().__init__(capacity=0)
        self.path = path

    def shouldFlush(self, record: logging.LogRecord) -> bool:
        return False


def _file_handler(requested: str) -> Tuple[logging.Handler, str]:
    try:
        Path(os.path.dirname(requested) or ".").mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(requested), requested
    except OSError:
        fallback = str(Path.cwd() / "workstation-setup.log")
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
    defer_file: bool = False,
) -> str:
    """Configure logging.

    Notes:
    - The file handler records everything at DEBUG, including captured
      command output.
    - If the requested log location is not writable we fall back to a file in
      the working directory and report the path actually used.
    - The console handler prints short tagged lines at `level`.
    - defer_file buffers records in memory and leaves the filesystem alone
      until `open_log_file()` is called.

    Returns the file path being used (the requested one while deferred).
    """

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_workstation_setup_configured", False):
        return getattr(logger, "_workstation_setup_log_path", log_path)

    requested = str(Path(log_path).expanduser())
    chosen_path = requested
    handlers: list[logging.Handler] = []

    if defer_file:
        pending = PendingLogHandler(requested)
        pending.setLevel(logging.DEBUG)
        handlers.append(pending)
        setattr(logger, "_workstation_setup_pending", pending)
    else:
        file_handler, chosen_path = _file_handler(requested)
        file_handler.setFormatter(_FILE_FORMAT)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(ConsoleFormatter(color=supports_color(sys.stdout)))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_workstation_setup_configured", True)
    setattr(logger, "_workstation_setup_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", requested, chosen_path
    )
    return chosen_path


def open_log_file() -> Optional[str]:
    """Swap a deferred log for a real file and replay what was buffered.

    A no-op returning the current path when nothing is pending.
    """

    logger = logging.getLogger()
    pending = getattr(logger, "_workstation_setup_pending", None)
    if pending is None:
        return getattr(logger, "_workstation_setup_log_path", None)

    file_handler, chosen_path = _file_handler(pending.path)
    file_handler.setFormatter(_FILE_FORMAT)
    file_handler.setLevel(logging.DEBUG)
    for record in pending.buffer:
        file_handler.handle(record)

    logger.removeHandler(pending)
    pending.close()
    logger.addHandler(file_handler)
    delattr(logger, "_workstation_setup_pending")
    setattr(logger, "_workstation_setup_log_path", chosen_path)
    logging.getLogger(__name__).debug("Log file opened at %s", chosen_path)
    return chosen_path
