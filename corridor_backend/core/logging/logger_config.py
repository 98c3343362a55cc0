"""
Central logging configuration for the corridor backend.
Defaults come from the loaded settings.
"""

import logging

from .file_logger import FileLogger, configure_external_loggers, setup_file_logging
from .middleware import TransactionIdFilter
from .structured_logger import setup_structured_logging

APP_LOGGER_NAME = "corridor_backend"


class LoggingConfig:
    """Central logging configuration manager."""

    def __init__(self):
        self.file_logger: FileLogger | None = None
        self.transaction_filter: TransactionIdFilter | None = None
        self._is_configured = False

    def setup(
        self,
        log_to_file: bool = True,
        log_level: str = "INFO",
        log_file_path: str = "logs/app.log",
        use_json_format: bool = True,
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.Logger:
        """
        Configure handlers once per process.

        Args:
            log_to_file: Whether to enable file logging
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file_path: Path to the log file
            use_json_format: Whether to use JSON formatting
            max_bytes: Maximum file size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured application logger
        """
        if self._is_configured:
            return get_logger()

        self.transaction_filter = TransactionIdFilter()

        if log_to_file:
            self.file_logger = setup_file_logging(
                log_file_path=log_file_path,
                log_level=log_level,
                use_json_format=use_json_format,
                max_bytes=max_bytes,
                backup_count=backup_count,
            )

        if self.file_logger:
            queue_handler = self.file_logger.get_queue_handler()
            queue_handler.addFilter(self.transaction_filter)
            configure_external_loggers(queue_handler)
        else:
            logger = setup_structured_logging(log_level, use_json_format)
            for handler in logger.handlers:
                handler.addFilter(self.transaction_filter)

        self._is_configured = True
        return get_logger()

    def shutdown(self) -> None:
        if self.file_logger:
            self.file_logger.stop()
            self.file_logger = None
        self._is_configured = False


_logging_config = LoggingConfig()


def setup_logging(
    log_to_file: bool | None = None,
    log_level: str | None = None,
    log_file_path: str | None = None,
    use_json_format: bool | None = None,
) -> logging.Logger:
    """
    Set up logging, filling unset arguments from settings.

    Args:
        log_to_file: Whether to enable file logging (settings.log_to_file)
        log_level: Logging level (settings.log_level)
        log_file_path: Path to log file (settings.log_file_path)
        use_json_format: Whether to use JSON format (settings.log_format == "json")

    Returns:
        Configured application logger
    """
    from ...config import settings

    if log_to_file is None:
        log_to_file = settings.log_to_file
    if log_level is None:
        log_level = settings.log_level
    if log_file_path is None:
        log_file_path = settings.log_file_path
    if use_json_format is None:
        use_json_format = settings.log_format.lower() == "json"

    return _logging_config.setup(
        log_to_file=log_to_file,
        log_level=log_level,
        log_file_path=log_file_path,
        use_json_format=use_json_format,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get an application logger.

    Args:
        name: Optional logger name, prefixed with the application logger name

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
    return logging.getLogger(APP_LOGGER_NAME)


def shutdown_logging() -> None:
    _logging_config.shutdown()
