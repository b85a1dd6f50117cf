"""
Logging setup for the pnpm-lockgen command line.

Library modules only call logging.getLogger(__name__); nothing is emitted
until setup_logging() attaches handlers to the "pnpm_lockgen" logger.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "pnpm_lockgen"

CONSOLE_FORMAT = "%(levelname_colored)s %(message)s"
VERBOSE_CONSOLE_FORMAT = "%(levelname_colored)s [%(component)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure the package logger for one CLI run.

    Args:
        verbose: DEBUG on the console, tagged with the emitting component
        quiet: No console output; the logger passes WARNING and above
        log_file: Optional path that receives the full DEBUG trace
        propagate: Let records reach the root logger (pytest's caplog)

    Returns:
        The configured "pnpm_lockgen" logger
    """
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING
    else:
        console_level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if log_file else console_level)

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(ColoredFormatter(
            VERBOSE_CONSOLE_FORMAT if verbose else CONSOLE_FORMAT,
            use_colors=sys.stderr.isatty(),
        ))
        logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.propagate = propagate
    return logger


class ColoredFormatter(logging.Formatter):
    """
    Console formatter for pnpm-lockgen.

    Adds two record attributes: levelname_colored (ANSI-coloured on a TTY)
    and component, the logger name below "pnpm_lockgen" (e.g. "executor").
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(LOGGER_NAME + "."):
            name = name[len(LOGGER_NAME) + 1:]
        record.component = name
        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            record.levelname_colored = f"{color}{record.levelname}{self.RESET}"
        else:
            record.levelname_colored = record.levelname
        return super().format(record)
