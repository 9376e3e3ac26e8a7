"""
Session logging for the room bot.

Each module asks for ``get_logger("name")``. Console output goes through
prompt_toolkit (colored by level on a TTY, at ``ROOMKEEPER_LOG_LEVEL``,
default INFO); the full DEBUG stream goes to one rotating file per session
under ``logs/`` or ``ROOMKEEPER_LOG_DIR``.
"""

import asyncio
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

LOGS_DIR: Path = Path(os.getenv("ROOMKEEPER_LOG_DIR") or Path(__file__).parents[3] / "logs").resolve()

LOG_FORMAT: str = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
CONSOLE_FORMAT: str = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H-%M-%S"
CONSOLE_DATE_FORMAT: str = "%H:%M:%S"

LOG_COLORS = {
    "DEBUG": "\033[36m",      # Cyan
    "INFO": "\033[32m",       # Green
    "WARNING": "\033[33m",    # Yellow
    "ERROR": "\033[31m",      # Red
    "CRITICAL": "\033[38;5;88m",  # Dark red
}
RESET_COLOR = "\033[0m"

NOISY_LOGGERS = ["highrise", "websockets", "aiohttp", "openai", "httpx", "httpcore"]

# One file per process; set on first use
LOG_FILEPATH: Path | None = None


class ColorFormatter(logging.Formatter):
    """Wrap each formatted record in the ANSI color for its level."""

    def format(self, record: logging.LogRecord) -> str:
        color = LOG_COLORS.get(record.levelname, "")
        message = super().format(record)
        return f"{color}{message}{RESET_COLOR}" if color else message


class PromptToolkitHandler(logging.Handler):
    """Console handler printing through ``print_formatted_text`` so ANSI colors render everywhere."""

    def __init__(self, formatter: logging.Formatter | None = None):
        super().__init__()
        if formatter:
            self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            print_formatted_text(ANSI(self.format(record)))
        except Exception:
            self.handleError(record)


def should_use_color() -> bool:
    """
    Returns:
        bool: True if stderr is attached to a TTY.
    """
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


def console_level() -> int:
    """Console threshold from ``ROOMKEEPER_LOG_LEVEL``; unknown names fall back to INFO."""
    name = os.getenv("ROOMKEEPER_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


file_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
console_formatter = (
    ColorFormatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT)
    if should_use_color()
    else logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT)
)


def get_log_filepath() -> Path:
    """Return this session's log file, creating ``LOGS_DIR`` on first call."""
    global LOG_FILEPATH

    if LOG_FILEPATH is None:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        LOG_FILEPATH = LOGS_DIR / f"roomkeeper-{datetime.now().strftime(DATE_FORMAT)}.log"
    return LOG_FILEPATH


def get_logger(logger_name: str) -> logging.Logger:
    """Return the named logger, attaching the console and session-file handlers once.

    Parameters
    ----------
    logger_name:
        Short component name, e.g. ``"command_router"``.

    Returns
    -------
    logging.Logger
        Logger with exactly two handlers and propagation disabled.
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console_handler = PromptToolkitHandler(formatter=console_formatter)
    console_handler.setLevel(console_level())
    logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        get_log_filepath(),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    return logger


def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """
    ``sys.excepthook`` replacement: log the defect with its traceback.

    KeyboardInterrupt is handed to the default hook untouched.
    """
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
        return
    get_logger("crash").critical(
        "[ANTI-CRASH] Uncaught exception, terminating",
        exc_info=(exception_type, exception_instance, exception_traceback),
    )


def handle_async_exception(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    """Event-loop exception handler: log failures nobody awaited and keep running."""
    exc = context.get("exception")
    message = context.get("message", "Unhandled asynchronous error")
    if exc is not None:
        get_logger("crash").error(
            "[ANTI-CRASH] Unhandled rejection: %s", message,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        get_logger("crash").error("[ANTI-CRASH] Unhandled rejection: %s", message)


def silence_noisy_loggers() -> None:
    """Pin SDK and HTTP client loggers to ERROR so chat traffic stays readable."""
    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.setLevel(logging.ERROR)
        noisy.propagate = False
        noisy.handlers = []


silence_noisy_loggers()
