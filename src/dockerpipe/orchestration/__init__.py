"""
Orchestration of the external container tool.

This module provides the named operations (version check, build, push,
login), the declarative operation table behind them, and the small helpers
they depend on: the build-descriptor writer and the tag incrementer.
"""

from .build_context import DOCKERFILE_TEMPLATE, ensure_dockerfile
from .legacy import (
    docker_build,
    docker_push,
    docker_setup_and_installation_check,
    login_container_registry,
)
from .operations import OPERATIONS, OperationTemplate, get_operation
from .orchestrator import CommandOrchestrator
from .tags import increment_tag

__all__ = [
    # Orchestrator
    "CommandOrchestrator",
    # Operation table
    "OPERATIONS",
    "OperationTemplate",
    "get_operation",
    # Compatibility entry points
    "docker_build",
    "docker_push",
    "docker_setup_and_installation_check",
    "login_container_registry",
    # Helpers
    "DOCKERFILE_TEMPLATE",
    "ensure_dockerfile",
    "increment_tag",
]
