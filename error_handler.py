"""
Standardized error handling utilities for the data chat core.
Provides the data loading exception taxonomy and consistent error logging.
"""

import logging
from typing import Optional

logger = logging.getLogger('data_chat.error_handler')

UNKNOWN_FUNCTION_MESSAGE = "Error: Unknown function {name}"
INVALID_ARGUMENTS_MESSAGE = "Error: Invalid arguments for {name}"


class ErrorSeverity:
    """Error severity levels for consistent logging and handling."""
    CRITICAL = "critical"  # Session cannot continue
    HIGH = "error"        # Major functionality broken
    MEDIUM = "warning"    # Functionality impacted but recoverable
    LOW = "info"          # Minor issues or expected behavior


class DataLoadError(Exception):
    """Base exception for everything that can go wrong while loading a dataset."""
    pass


class NetworkError(DataLoadError):
    """The data source could not be reached (DNS, TLS or connection failure)."""
    pass


class FetchError(DataLoadError):
    """The data source answered with a non-success HTTP status."""

    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP error! status: {status_code}")


class ParseError(DataLoadError):
    """The fetched text is not valid JSON."""
    pass


class UnsupportedFormatError(DataLoadError):
    """The requested data type is neither csv nor json."""

    def __init__(self, data_type):
        self.data_type = data_type
        super().__init__(f"Unsupported data type: {data_type}")


class ConfigurationError(Exception):
    """Custom exception for configuration-related errors."""
    pass


def log_error_with_context(
    error: Exception,
    context: str,
    severity: str = ErrorSeverity.MEDIUM,
    additional_info: Optional[dict] = None
) -> None:
    """
    Log an error with consistent formatting and context information.

    Args:
        error: The exception that occurred
        context: Description of where/when the error occurred
        severity: Error severity level
        additional_info: Additional context information to log
    """
    error_msg = f"{context}: {str(error)}"

    if additional_info:
        error_msg += f" | Context: {additional_info}"

    log_func = getattr(logger, severity, logger.error)

    if severity in (ErrorSeverity.CRITICAL, ErrorSeverity.HIGH):
        log_func(error_msg, exc_info=error)
    else:
        log_func(error_msg)
