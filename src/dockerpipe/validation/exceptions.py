"""
Exception taxonomy and error handling.

This module defines the errors raised by the command runner and the
orchestrator, plus a single helper that logs an error consistently and
optionally re-raises it.
"""

import logging
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class DockerPipeError(Exception):
    """Base class for every error raised by dockerpipe."""


class ValidationError(DockerPipeError):
    """
    Exception raised when validation of configuration or parameters fails.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class LaunchFailure(DockerPipeError):
    """
    The external process could not be started.

    The underlying ``OSError`` is kept unmodified in ``os_error`` and is
    also chained as ``__cause__``.
    """

    def __init__(self, executable: str, os_error: OSError):
        super().__init__(f"Failed to launch '{executable}': {os_error}")
        self.executable = executable
        self.os_error = os_error


class ContentError(DockerPipeError):
    """A streamed line contained the configured error marker."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation


class ToolVersionCheckFailure(ContentError):
    """The version probe wrote to stderr."""


class CommandTimeout(DockerPipeError):
    """The process outlived the configured timeout and was terminated."""

    def __init__(self, executable: str, timeout: float):
        super().__init__(f"'{executable}' timed out after {timeout} seconds")
        self.executable = executable
        self.timeout = timeout


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_subprocess_error(error: Exception, command: str, **kwargs) -> None:
    """Handle subprocess-related errors."""
    handle_error(error, f"subprocess command '{command}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors by logging them and exiting."""
    exit_code = kwargs.pop('exit_code', 1)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    import sys
    sys.exit(exit_code)
