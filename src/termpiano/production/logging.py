"""
Production Logging

Colored console output plus an optional rotating log file.
The console handler is muted while curses owns the screen.
"""

import logging
import sys
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = 'termpiano'


class ColorFormatter(logging.Formatter):
    """Colored log formatter"""
    COLORS = {
        'DEBUG': '\033[38;5;244m',
        'INFO': '\033[38;5;44m',
        'WARNING': '\033[38;5;214m',
        'ERROR': '\033[38;5;196m',
        'CRITICAL': '\033[38;5;196;1m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: Optional[str] = None, include_colors: bool = True):
        super().__init__(fmt)
        self.include_colors = include_colors and sys.stderr.isatty()

    def format(self, record):
        formatted = super().format(record)
        if not self.include_colors:
            return formatted
        color = self.COLORS.get(record.levelname, self.RESET)
        return f"{color}{formatted}{self.RESET}"


class ConsoleHandler(logging.StreamHandler):
    """stderr handler that can be silenced for the length of a curses session"""

    def __init__(self):
        super().__init__(sys.stderr)
        self.muted = False

    def emit(self, record):
        if not self.muted:
            super().emit(record)


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None,
                  max_file_size: int = 5 * 1024 * 1024, backup_count: int = 3) -> logging.Logger:
    """
    Configure the termpiano logger

    Args:
        verbose: Enable debug output
        log_file: Optional log file path, rotated at max_file_size

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = ConsoleHandler()
    console.setFormatter(ColorFormatter('%(levelname)s %(message)s'))
    logger.addHandler(console)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                log_file,
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            fh.setFormatter(logging.Formatter(
                '%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s'))
            logger.addHandler(fh)
        except OSError as e:
            logger.warning(f"Failed to setup file logging: {e}")

    return logger


@contextmanager
def console_muted(logger: Optional[logging.Logger] = None):
    """Silence console handlers; file handlers keep recording"""
    logger = logger or logging.getLogger(LOGGER_NAME)
    consoles = [h for h in logger.handlers if isinstance(h, ConsoleHandler)]
    for handler in consoles:
        handler.muted = True
    try:
        yield logger
    finally:
        for handler in consoles:
            handler.muted = False
