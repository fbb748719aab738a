"""
Configuration validation utilities.

This module turns the raw `[runner]` and `[docker]` tables into validated
configuration dataclasses.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import DockerConfig, RunnerConfig
from ..validation import (
    ValidationError,
    validate_non_empty_string,
    validate_positive_float,
)

logger = logging.getLogger(__name__)


def validate_runner_config(runner_data: Dict[str, Any]) -> RunnerConfig:
    """
    Validate and create a RunnerConfig from raw configuration data.

    A ``timeout_seconds`` of 0 (or an absent key) disables the timeout.

    Args:
        runner_data: Raw `[runner]` table from TOML

    Returns:
        Validated RunnerConfig instance

    Raises:
        ValidationError: If validation fails
    """
    poll_interval = validate_positive_float(
        runner_data.get("poll_interval_seconds", 0.1),
        min_value=0.001,  # 1ms minimum
        max_value=10.0,
        field_name="runner.poll_interval_seconds",
    )

    timeout = validate_positive_float(
        runner_data.get("timeout_seconds", 0),
        min_value=0.0,
        max_value=86400.0,  # one day
        field_name="runner.timeout_seconds",
    )

    if poll_interval > 1.0:
        logger.warning(
            f"runner.poll_interval_seconds={poll_interval} delays status output noticeably"
        )

    return RunnerConfig(
        poll_interval_seconds=poll_interval,
        timeout_seconds=timeout or None,
    )


def validate_docker_config(docker_data: Dict[str, Any]) -> DockerConfig:
    """
    Validate and create a DockerConfig from raw configuration data.

    Args:
        docker_data: Raw `[docker]` table from TOML

    Returns:
        Validated DockerConfig instance

    Raises:
        ValidationError: If validation fails
    """
    executable = validate_non_empty_string(
        docker_data.get("executable", "docker"),
        field_name="docker.executable",
    )
    version_check_executable = validate_non_empty_string(
        docker_data.get("version_check_executable", executable),
        field_name="docker.version_check_executable",
    )
    error_marker = docker_data.get("error_marker", "ERROR")
    if not isinstance(error_marker, str) or not error_marker:
        raise ValidationError(
            "docker.error_marker must be a non-empty string",
            field_name="docker.error_marker",
            value=error_marker,
        )
    dockerfile_path = validate_non_empty_string(
        docker_data.get("dockerfile_path", "Dockerfile"),
        field_name="docker.dockerfile_path",
    )
    login_status_prefix = docker_data.get("login_status_prefix", "[LoginContainerRegistry]")
    if not isinstance(login_status_prefix, str):
        raise ValidationError(
            "docker.login_status_prefix must be a string",
            field_name="docker.login_status_prefix",
            value=login_status_prefix,
        )

    return DockerConfig(
        executable=executable,
        version_check_executable=version_check_executable,
        error_marker=error_marker,
        dockerfile_path=Path(dockerfile_path),
        login_status_prefix=login_status_prefix,
    )
