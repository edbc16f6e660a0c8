"""
Logging configuration for the application.
Events go to an append-only log file so they never mix with the chat screen.
"""
import logging
import os
import sys

from config import Config


class ColoredFormatter(logging.Formatter):
    """Custom formatter with log levels."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _build_file_handler(log_file: str) -> logging.Handler | None:
    """Create the file handler, or None when the log path is unusable."""
    try:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return logging.FileHandler(log_file, encoding="utf-8", delay=True)
    except OSError as e:
        print(f"log file '{log_file}' unavailable, logging to stderr: {e}", file=sys.stderr)
        return None


def setup_logger(
    name: str,
    level: int | str = logging.INFO,
    log_file: str | None = None,
    console: bool = False
) -> logging.Logger:
    """
    Set up a logger.

    Args:
        name: Logger name
        level: Logging level
        log_file: Path of the append-only log file
        console: Also echo records to stderr with colors

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if logger.handlers:
        return logger

    file_handler = _build_file_handler(log_file) if log_file else None
    if file_handler is not None:
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    if console or file_handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(ColoredFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(handler)

    return logger


def truncate(text: str, max_length: int = Config.MAX_LOG_PREVIEW) -> str:
    """Shorten text for a log line, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}…"


app_logger = setup_logger(
    "local_felix",
    level=Config.LOG_LEVEL,
    log_file=Config.LOG_FILE,
    console=Config.LOG_TO_CONSOLE
)
