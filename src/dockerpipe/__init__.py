"""
dockerpipe: streamed orchestration of container build and push tools.

This package launches the external container tool, streams its standard
output and standard error line by line without blocking the caller, and
detects failures from the streamed content even when the tool exits 0.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Error taxonomy and input validation
- executor: Process launch, line streaming and teardown
- classification: Error-marker detection over streamed lines
- orchestration: Named operations (check, build, push, login) and helpers
- cli: Command-line interface

Usage:
    From command line:
        dockerpipe build registry.example.com team/server v2

    Programmatically:
        from dockerpipe import CommandOrchestrator
        orchestrator = CommandOrchestrator()
        result = await orchestrator.build("registry.example.com", "team/server", "v2", print)
        result.raise_for_failure()
"""

from .config import get_config, clear_config_cache, set_config_path
from .cli import main_cli

from .models import (
    AppConfig,
    CommandResult,
    CommandSpec,
    DockerConfig,
    LineEvent,
    RunnerConfig,
    StatusSink,
)

from .validation import (
    CommandTimeout,
    ContentError,
    DockerPipeError,
    LaunchFailure,
    ToolVersionCheckFailure,
    ValidationError,
)

from .executor import CommandRunner
from .classification import StreamClassification, classify, fold_error_message
from .orchestration import (
    CommandOrchestrator,
    docker_build,
    docker_push,
    docker_setup_and_installation_check,
    ensure_dockerfile,
    increment_tag,
    login_container_registry,
)

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "CommandOrchestrator",
    "CommandRunner",
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "main_cli",
    # Models
    "AppConfig",
    "CommandResult",
    "CommandSpec",
    "DockerConfig",
    "LineEvent",
    "RunnerConfig",
    "StatusSink",
    # Errors
    "CommandTimeout",
    "ContentError",
    "DockerPipeError",
    "LaunchFailure",
    "ToolVersionCheckFailure",
    "ValidationError",
    # Classification
    "StreamClassification",
    "classify",
    "fold_error_message",
    # Compatibility entry points
    "docker_build",
    "docker_push",
    "docker_setup_and_installation_check",
    "login_container_registry",
    # Helpers
    "ensure_dockerfile",
    "increment_tag",
]
