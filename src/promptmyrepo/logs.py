"""
Logging helpers: namespaced loggers and a coloured stderr handler for the CLI.
"""

from __future__ import annotations

import logging
import sys
from typing import Dict, Optional, TextIO

from colorama import Fore, Style, init as colorama_init

BASE_LOGGER = "promptmyrepo"

_LEVEL_COLORS: Dict[int, str] = {
    logging.DEBUG: Style.DIM,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColorFormatter(logging.Formatter):
    """``[promptmyrepo] message`` lines, coloured by level."""

    def __init__(self, color: bool = True) -> None:
        super().__init__(f"[{BASE_LOGGER}] %(message)s")
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno) if self._color else None
        return f"{color}{msg}{Style.RESET_ALL}" if color else msg


_colorama_ready = False


def _init_colorama() -> None:
    global _colorama_ready
    if not _colorama_ready:
        colorama_init()
        _colorama_ready = True


def _isatty(stream: TextIO) -> bool:
    return bool(getattr(stream, "isatty", lambda: False)())


def get_logger(name: str) -> logging.Logger:
    if name == BASE_LOGGER or name.startswith(BASE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{BASE_LOGGER}.{name}")


def setup_logging(verbosity: int = 0, stream: Optional[TextIO] = None) -> logging.Logger:
    """Configure the base logger once and return it.

    ``verbosity`` 0 shows warnings and errors, 1 adds info, 2 adds debug.
    Calling it again replaces the previously installed handler.
    """
    if stream is None:
        # colorama must wrap sys.stderr before the handler captures it.
        if _isatty(sys.stderr):
            _init_colorama()
        stream = sys.stderr
    is_tty = _isatty(stream)

    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logger = logging.getLogger(BASE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_promptmyrepo", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColorFormatter(color=is_tty))
    handler._promptmyrepo = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
