"""
Configuration management for the dockerpipe package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file with singleton pattern management.
"""

from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

from .loader import CONFIG_SECTIONS, read_config_tables
from .validators import validate_docker_config, validate_runner_config

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "CONFIG_SECTIONS",
    "read_config_tables",
    "validate_docker_config",
    "validate_runner_config",
]
