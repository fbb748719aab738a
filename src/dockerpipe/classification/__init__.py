"""
Line classification for the dockerpipe package.

This module detects failure markers embedded in the streamed output of the
external tool.
"""

from .classifier import (
    DEFAULT_ERROR_MARKER,
    StreamClassification,
    classify,
    fold_error_message,
)

__all__ = [
    "DEFAULT_ERROR_MARKER",
    "StreamClassification",
    "classify",
    "fold_error_message",
]
