"""
Data models for the dockerpipe package.

Configuration Models:
- Runner polling and timeout settings
- External tool settings (executables, error marker, descriptor path)

Command Models:
- Process launch description
- Per-line output events
- Final operation results
"""

from .command import CommandResult, CommandSpec, LineEvent, StatusSink
from .config import AppConfig, DockerConfig, RunnerConfig

__all__ = [
    # Configuration
    "AppConfig",
    "DockerConfig",
    "RunnerConfig",
    # Command
    "CommandResult",
    "CommandSpec",
    "LineEvent",
    "StatusSink",
]
