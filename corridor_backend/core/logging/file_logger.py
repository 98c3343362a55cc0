"""
File logging with queue-based writing and rotation.
Handlers run on a listener thread so request handlers never block on I/O.
"""

import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler

from .structured_logger import build_formatter


class FileLogger:
    """Queue-based file logger with rotation."""

    def __init__(
        self,
        log_file_path: str = "logs/app.log",
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 5,
        log_level: str = "INFO",
        use_json_format: bool = True,
    ):
        self.log_file_path = log_file_path
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.log_level = log_level
        self.use_json_format = use_json_format
        self._log_queue = queue.Queue()
        self._listener: QueueListener | None = None
        self._queue_handler: QueueHandler | None = None

        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level.upper())

    def setup_file_handler(self) -> RotatingFileHandler:
        """Rotating file handler using the configured formatter."""
        file_handler = RotatingFileHandler(
            self.log_file_path, maxBytes=self.max_bytes, backupCount=self.backup_count
        )
        file_handler.setLevel(self.level)
        file_handler.setFormatter(build_formatter(self.use_json_format))
        return file_handler

    def setup_console_handler(self) -> logging.StreamHandler:
        """Console handler using the configured formatter."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.level)
        console_handler.setFormatter(build_formatter(self.use_json_format))
        return console_handler

    def start_queue_listener(self, handlers: list[logging.Handler]) -> None:
        self._listener = QueueListener(
            self._log_queue, *handlers, respect_handler_level=True
        )
        self._listener.start()

    def get_queue_handler(self) -> QueueHandler:
        if self._queue_handler is None:
            self._queue_handler = QueueHandler(self._log_queue)
            self._queue_handler.setLevel(self.level)
        return self._queue_handler

    def stop(self) -> None:
        """Flush pending records and stop the listener thread."""
        if self._listener:
            self._listener.stop()
            self._listener = None


def setup_file_logging(
    log_file_path: str = "logs/app.log",
    log_level: str = "INFO",
    use_json_format: bool = True,
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 5,
) -> FileLogger | None:
    """
    Set up console and rotating file output behind a queue.

    Args:
        log_file_path: Path to the log file
        log_level: Logging level
        use_json_format: Whether to use JSON formatting
        max_bytes: Maximum file size before rotation
        backup_count: Number of backup files to keep

    Returns:
        FileLogger instance, or None when the file cannot be opened
    """
    try:
        file_logger = FileLogger(
            log_file_path=log_file_path,
            max_bytes=max_bytes,
            backup_count=backup_count,
            log_level=log_level,
            use_json_format=use_json_format,
        )
        file_logger.start_queue_listener(
            [file_logger.setup_console_handler(), file_logger.setup_file_handler()]
        )
        return file_logger
    except OSError as e:
        logging.error(f"Failed to setup file logging: {e}")
        return None


def configure_external_loggers(queue_handler: QueueHandler) -> None:
    """Route library loggers and the root logger through the queue."""
    external_levels = {
        "sqlalchemy": logging.WARNING,
        "asyncmy": logging.WARNING,
        "uvicorn": logging.INFO,
        "fastapi": logging.INFO,
    }

    for logger_name, level in external_levels.items():
        ext_logger = logging.getLogger(logger_name)
        ext_logger.handlers.clear()
        ext_logger.addHandler(queue_handler)
        ext_logger.propagate = False
        ext_logger.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(queue_handler)
    root_logger.setLevel(logging.INFO)

    logging.captureWarnings(True)
