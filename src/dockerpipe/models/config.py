"""
Configuration data models.

This module contains the configuration structures for the command runner,
the external docker tool, and the aggregated application configuration.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class RunnerConfig:
    """
    Configuration for the command runner, loaded from `[runner]`.
    """

    # Seconds between process liveness checks and queue drains.
    poll_interval_seconds: float = 0.1
    # Kill the process tree after this many seconds. None waits forever.
    timeout_seconds: Optional[float] = None


@dataclass
class DockerConfig:
    """
    Configuration for the external container tool, loaded from `[docker]`.
    """

    # Executable used for build, push and login.
    executable: str = "docker"
    # Executable used for the version probe.
    version_check_executable: str = "docker"
    # Substring that marks a streamed line as a failure.
    error_marker: str = "ERROR"
    # Build-context descriptor written by the installation check.
    dockerfile_path: Path = Path("Dockerfile")
    # Prefix applied to every status line forwarded by the login operation.
    login_status_prefix: str = "[LoginContainerRegistry]"


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    runner: RunnerConfig
    docker: DockerConfig
