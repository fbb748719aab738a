"""
Validation and error handling for the dockerpipe package.

This module provides the error taxonomy used by the runner and the
orchestrator together with input validation helpers.
"""

from .exceptions import (
    CommandTimeout,
    ContentError,
    DockerPipeError,
    ErrorSeverity,
    LaunchFailure,
    ToolVersionCheckFailure,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_subprocess_error,
)

from .validators import (
    validate_non_empty_string,
    validate_positive_float,
)

__all__ = [
    # Errors
    "CommandTimeout",
    "ContentError",
    "DockerPipeError",
    "ErrorSeverity",
    "LaunchFailure",
    "ToolVersionCheckFailure",
    "ValidationError",
    # Handlers
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "handle_subprocess_error",
    # Validators
    "validate_non_empty_string",
    "validate_positive_float",
]
