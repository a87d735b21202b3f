# seatview/core/logging.py

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

CONSOLE_FORMAT = '%(levelname)-8s [%(name)s] %(message)s'
FILE_FORMAT = '%(asctime)s - %(levelname)-8s [%(name)s] %(message)s'


class Logger:
    """
    Engine-wide logger.
    Console output at the configured level; with a log directory, a
    per-session file that keeps everything down to DEBUG.
    """

    def __init__(self, name: str = "SeatView", log_dir: Optional[str] = None, level: str = "INFO"):
        self.name = name
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_file: Optional[Path] = None

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        # Handlers survive on the stdlib logger; attach them once
        if not self.logger.handlers:
            self.logger.addHandler(self._console_handler(level))
            if self.log_dir is not None:
                self.logger.addHandler(self._file_handler())

    def _console_handler(self, level: str) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(getattr(logging, level.upper(), logging.INFO))
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        return handler

    def _file_handler(self) -> logging.Handler:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"seatview_{timestamp}.log"

        handler = logging.FileHandler(self.log_file)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        return handler

    def debug(self, message: str):
        self.logger.debug(message)

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str, exc_info: bool = False):
        self.logger.error(message, exc_info=exc_info)


_logger: Optional[Logger] = None


def get_logger() -> Logger:
    """Shared engine logger, created with console defaults on first use."""
    global _logger
    if _logger is None:
        _logger = Logger()
    return _logger


def init_logger(name: str = "SeatView", log_dir: Optional[str] = None, level: str = "INFO") -> Logger:
    """(Re)configure the shared engine logger."""
    global _logger
    logging.getLogger(name).handlers.clear()
    _logger = Logger(name, log_dir, level)
    return _logger
