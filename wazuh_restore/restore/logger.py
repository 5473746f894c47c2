"""Dual console and file logging for restore runs."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class Colors:
    OKBLUE = '\033[94m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'


class ColorFormatter(logging.Formatter):
    """Formatter that tints console lines by level."""

    LEVEL_COLORS = {
        logging.INFO: Colors.OKBLUE,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.FAIL,
        logging.CRITICAL: Colors.FAIL,
    }

    def format(self, record):
        message = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{Colors.ENDC}"


def default_log_file(log_dir: Path, now: Optional[datetime] = None) -> Path:
    """Timestamped log file name, one per run."""
    now = now or datetime.now()
    return Path(log_dir) / f"wazuh_restore_{now.strftime('%Y-%m-%d_%H%M%S')}.log"


class RestoreLogger:
    """
    Logger instance handed to every restore component.

    Writes to stdout (colored when attached to a terminal) and appends to the
    run log file. Use as a context manager so handlers are flushed and closed
    on every exit path.
    """

    def __init__(self, log_file: Optional[Path], name: str = 'wazuh_restore', stream=None):
        self.log_file = Path(log_file) if log_file else None
        stream = stream or sys.stdout

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler(stream)
        console_handler.setLevel(logging.INFO)
        if hasattr(stream, 'isatty') and stream.isatty():
            console_handler.setFormatter(ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        else:
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        self.logger.addHandler(console_handler)

        file_error = None
        if self.log_file:
            try:
                self.log_file.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(self.log_file, mode='a')
            except OSError as e:
                file_error = e
                self.log_file = None
            else:
                file_handler.setLevel(logging.INFO)
                file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
                self.logger.addHandler(file_handler)

        if file_error:
            self.warning(f"Could not open log file ({file_error}); logging to console only")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str, exc_info=None):
        if exc_info:
            self.logger.error(message, exc_info=exc_info)
        else:
            self.logger.error(message)

    def output(self, text: str):
        """Record captured command output, one log line per output line."""
        for line in text.splitlines():
            if line.strip():
                self.logger.info(f"  | {line}")

    def section(self, title: str):
        separator = "=" * 70
        self.info(separator)
        self.info(f"  {title}")
        self.info(separator)

    def close(self):
        for handler in list(self.logger.handlers):
            try:
                handler.flush()
            finally:
                handler.close()
                self.logger.removeHandler(handler)
