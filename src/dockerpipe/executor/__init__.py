"""
Command execution for the dockerpipe package.

This module launches the external tool, streams its output line by line
without blocking the event loop, and handles process teardown.
"""

from .command_runner import CommandRunner, DEFAULT_POLL_INTERVAL
from .process_control import (
    build_popen_args,
    check_executable_available,
    quote_argument,
    terminate_process_tree,
)

__all__ = [
    "CommandRunner",
    "DEFAULT_POLL_INTERVAL",
    "build_popen_args",
    "check_executable_available",
    "quote_argument",
    "terminate_process_tree",
]
