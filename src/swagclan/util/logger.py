"""
Process-wide logging for SwagClan.

Every named logger writes through the same two handlers: a prompt_toolkit
console handler (coloured when stderr is a terminal) and one rotating session
log file. ``configure_logging`` applies the console level from the app config,
quiets chatty third-party loggers and installs the uncaught-exception hook.
"""

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from pathlib import Path
from datetime import datetime
from typing import Tuple, Union
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

# -------------------- Configuration --------------------
LOGS_DIR: Path = Path(os.getenv("SWAGCLAN_LOG_DIR") or Path(__file__).parents[3] / "logs").resolve()

LOG_FORMAT: str = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H-%M-%S"

LOG_COLORS = {
    "DEBUG": "\033[36m",      # Cyan
    "INFO": "\033[32m",       # Green
    "WARNING": "\033[33m",    # Yellow
    "ERROR": "\033[31m",      # Red
    "CRITICAL": "\033[38;5;88m",  # Dark Red (ANSI 256-color)
}
RESET_COLOR = "\033[0m"

# Log files older than this many seconds are not reused on restart
SESSION_REUSE_SECONDS = 60
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

NOISY_LOGGERS = (
    "discord", "discord.gateway", "discord.client", "discord.http",
    "websockets", "aiohttp", "urllib3",
)

# Resolved on first use and shared by every logger
LOG_FILEPATH: Path | None = None
_HANDLERS: Tuple[logging.Handler, logging.Handler] | None = None


# -------------------- Formatters --------------------
class ColorFormatter(logging.Formatter):
    """Wrap formatted records in an ANSI colour chosen by level name."""

    def format(self, record: logging.LogRecord) -> str:
        color = LOG_COLORS.get(record.levelname, "")
        message = super().format(record)
        return f"{color}{message}{RESET_COLOR}" if color else message


class PromptToolkitHandler(logging.Handler):
    """
    Console handler that prints through prompt_toolkit.

    ``print_formatted_text`` keeps log lines from tearing through an active
    prompt and renders the ANSI colour codes produced by :class:`ColorFormatter`.
    """

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
    """Return True when stderr is attached to a terminal."""
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


# -------------------- Handlers --------------------
def get_log_filepath() -> Path:
    """
    Get or create the log file path for the current session.

    The most recent log file from today is reused when it was touched within
    the last minute (a quick restart); otherwise a new timestamped file is
    chosen.
    """
    global LOG_FILEPATH

    if LOG_FILEPATH is None:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        now = datetime.now()
        existing_logs = sorted(
            LOGS_DIR.glob(f"{now:%Y-%m-%d}*.log"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )

        if existing_logs and now.timestamp() - existing_logs[0].stat().st_mtime < SESSION_REUSE_SECONDS:
            LOG_FILEPATH = existing_logs[0]
        else:
            LOG_FILEPATH = LOGS_DIR / (now.strftime(DATE_FORMAT) + ".log")

    return LOG_FILEPATH


def shared_handlers() -> Tuple[logging.Handler, logging.Handler]:
    """
    Return the console and file handlers attached to every SwagClan logger.

    A single RotatingFileHandler per session file means rollover happens once,
    not once per named logger.
    """
    global _HANDLERS

    if _HANDLERS is None:
        plain_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        console_handler = PromptToolkitHandler(
            formatter=ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT) if should_use_color() else plain_formatter
        )
        console_handler.setLevel(logging.INFO)

        file_handler = RotatingFileHandler(
            get_log_filepath(),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(plain_formatter)

        _HANDLERS = (console_handler, file_handler)

    return _HANDLERS


def set_console_level(level: Union[int, str]) -> int:
    """Set the console threshold for every logger; accepts ``"DEBUG"`` style names. Returns the numeric level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    console_handler, _ = shared_handlers()
    console_handler.setLevel(level)
    return level


# -------------------- Logger Setup --------------------
def setup_logger(logger_name: str) -> logging.Logger:
    """Return the named logger, attaching the shared handlers on first use."""
    logger = logging.getLogger(logger_name)

    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in shared_handlers():
        logger.addHandler(handler)

    return logger


def get_logger(logger_name: str) -> logging.Logger:
    """Retrieve a logger configured for SwagClan, creating it if necessary."""
    return setup_logger(logger_name)


# -------------------- Process-wide hooks --------------------
def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """
    Log uncaught exceptions; installed as ``sys.excepthook``.

    KeyboardInterrupt is forwarded to the default hook so Ctrl+C still exits
    normally.
    """
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
    else:
        get_logger("uncaught").error(
            "Uncaught exception", exc_info=(exception_type, exception_instance, exception_traceback)
        )


def quiet_noisy_loggers(level: int = logging.ERROR) -> None:
    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.setLevel(level)
        noisy.propagate = False
        noisy.handlers = []


def configure_logging(console_level: Union[int, str] = logging.INFO) -> None:
    """Apply process-wide logging settings; called once at startup."""
    try:
        set_console_level(console_level)
    except ValueError as exc:
        get_logger("logger").warning("%s; keeping the console at INFO", exc)
        set_console_level(logging.INFO)
    quiet_noisy_loggers()
    sys.excepthook = handle_exception
