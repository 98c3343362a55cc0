"""Logging infrastructure for the corridor backend."""

from .file_logger import FileLogger, configure_external_loggers, setup_file_logging
from .logger_config import get_logger, setup_logging, shutdown_logging
from .middleware import (
    RequestIdMiddleware,
    TransactionIdFilter,
    get_transaction_id,
    set_transaction_id,
)

__all__ = [
    "FileLogger",
    "setup_file_logging",
    "configure_external_loggers",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    "RequestIdMiddleware",
    "TransactionIdFilter",
    "get_transaction_id",
    "set_transaction_id",
]
