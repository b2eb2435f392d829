"""
Logging utilities for the trackgate toolkit.

Provides unified structured logging:
- pretty console output via Rich
- structured (JSON) file output to `replay.log` when running `trackgate replay`
"""

import logging
import sys
import json
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# subcommands that also get a JSON log file in the working directory
FILE_LOGGED_COMMANDS = ("replay",)


class JSONFormatter(logging.Formatter):
    """
    Formatter that serializes log records to JSON.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level":     record.levelname,
            "logger":    record.name,
            "message":   record.getMessage(),
        }
        return json.dumps(log_record)


def _command_from_argv() -> str | None:
    args = iter(sys.argv[1:])
    for arg in args:
        if arg == "--log-level":
            next(args, None)
            continue
        if arg.startswith("-"):
            continue
        return arg if arg in FILE_LOGGED_COMMANDS else None
    return None


def get_logger(name: str, level: int | str = logging.INFO) -> logging.Logger:
    """
    Return a configured logger for the given name.

    Attaches:
    - a RichHandler for console output
    - when the command is 'replay', a FileHandler writing JSON logs to {cwd}/replay.log

    Parameters
    ----------
    name
        Logger name (typically __name__).
    level
        Log level (int or string), defaults to INFO.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        # Console via Rich (stderr, so command output stays clean)
        console_handler = RichHandler(rich_tracebacks=True, console=Console(stderr=True))
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

        command = _command_from_argv()
        if command is not None:
            log_path = Path.cwd() / f"{command}.log"
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)

    return logger


def set_level(level: int | str) -> None:
    """
    Re-level every trackgate logger and its handlers (used by `--log-level`).
    """
    for name, obj in logging.Logger.manager.loggerDict.items():
        if not name.startswith("trackgate") or not isinstance(obj, logging.Logger):
            continue
        obj.setLevel(level)
        for handler in obj.handlers:
            handler.setLevel(level)
