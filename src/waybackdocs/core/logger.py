"""
Logging and Error Handling System

This module provides centralized logging configuration and per-task error
tracking for the waybackdocs downloader.
"""

import logging
import logging.handlers
import os
import sys
import threading
from datetime import datetime
from typing import Optional, Dict, Any, List
import traceback
from pathlib import Path


class WaybackDocsLogger:
    """
    Centralized logging system for waybackdocs.

    Console output carries progress lines; rotating files keep the full
    debug trail and a separate error log.
    """

    def __init__(self, log_dir: Optional[str] = "logs", app_name: str = "waybackdocs"):
        """
        Initialize the logging system.

        Args:
            log_dir: Directory to store log files, or None for console only
            app_name: Name of the application for log formatting
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.app_name = app_name
        self.loggers: Dict[str, logging.Logger] = {}

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    def setup_logger(self, level: int = logging.INFO) -> logging.Logger:
        """
        Set up the main application logger with file and console handlers.

        Args:
            level: Console logging level (default: INFO)

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger(self.app_name)
        logger.setLevel(logging.DEBUG)

        # Prevent duplicate handlers
        if logger.handlers:
            return logger

        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(threadName)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        if self.log_dir is not None:
            # File handler with rotation
            log_file = self.log_dir / f"{self.app_name}.log"
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)

            error_file = self.log_dir / f"{self.app_name}_errors.log"
            error_handler = logging.handlers.RotatingFileHandler(
                error_file,
                maxBytes=5*1024*1024,  # 5MB
                backupCount=3,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(detailed_formatter)

            logger.addHandler(file_handler)
            logger.addHandler(error_handler)

        self.loggers['main'] = logger
        return logger

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            name: Name of the module/component

        Returns:
            Logger instance for the component
        """
        full_name = f"{self.app_name}.{name}"

        if full_name not in self.loggers:
            self.loggers[full_name] = logging.getLogger(full_name)

        return self.loggers[full_name]

    def log_system_info(self):
        """Log system information for debugging."""
        logger = self.get_logger('system')

        logger.debug("=== waybackdocs started ===")
        logger.debug(f"Python version: {sys.version}")
        logger.debug(f"Platform: {sys.platform}")
        logger.debug(f"Working directory: {os.getcwd()}")
        if self.log_dir is not None:
            logger.debug(f"Log directory: {self.log_dir.absolute()}")


class ErrorTracker:
    """
    Records per-task failures reported by download workers.

    Workers run on separate threads, so appends are serialized.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.errors: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def log_error(self,
                  error: Optional[BaseException],
                  context: str,
                  url: str = None,
                  message: str = None) -> str:
        """
        Log a task failure with context information.

        Args:
            error: The exception that occurred, or None for status failures
            context: Stage where the failure occurred (e.g. 'request', 'write')
            url: URL being processed when the failure occurred
            message: Explicit message when there is no exception

        Returns:
            Error ID for tracking
        """
        with self._lock:
            error_id = f"ERR_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.errors):03d}"
            error_data = {
                'id': error_id,
                'timestamp': datetime.now(),
                'type': type(error).__name__ if error is not None else 'TaskFailure',
                'message': message or str(error),
                'context': context,
                'url': url,
            }
            self.errors.append(error_data)

        log_message = f"[{error_id}] {error_data['type']}: {error_data['message']}"
        log_message += f" (Context: {context})"
        if url:
            log_message += f" (URL: {url})"

        self.logger.error(log_message)
        if error is not None and error.__traceback__ is not None:
            self.logger.debug(
                f"[{error_id}] Full traceback:\n"
                + ''.join(traceback.format_exception(type(error), error, error.__traceback__))
            )

        return error_id

    def get_error_summary(self) -> Dict[str, Any]:
        """Summarize recorded failures by count and type."""
        with self._lock:
            errors = list(self.errors)
        type_counts: Dict[str, int] = {}
        for error in errors:
            type_counts[error['context']] = type_counts.get(error['context'], 0) + 1
        return {
            'total_errors': len(errors),
            'by_context': type_counts,
            'recent_errors': errors[-5:],
        }


# Global logger instance
_logger_instance: Optional[WaybackDocsLogger] = None


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance under the application namespace.

    Args:
        name: Name of the module/component (optional)

    Returns:
        Logger instance
    """
    global _logger_instance

    if _logger_instance is None:
        _logger_instance = WaybackDocsLogger(log_dir=None)

    return _logger_instance.get_logger(name or 'main')


def initialize_logging(log_dir: Optional[str] = "logs", level: int = logging.INFO) -> logging.Logger:
    """
    Initialize the global logging system.

    Args:
        log_dir: Directory for log files (None disables file logging)
        level: Console logging level

    Returns:
        The configured application logger
    """
    global _logger_instance
    _logger_instance = WaybackDocsLogger(log_dir)
    logger = _logger_instance.setup_logger(level)
    _logger_instance.log_system_info()
    return logger


def create_error_tracker(logger_name: str = None) -> ErrorTracker:
    """
    Create an error tracker bound to an application logger.

    Args:
        logger_name: Name of the logger to use
    """
    return ErrorTracker(get_logger(logger_name))
