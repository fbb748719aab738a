"""
Reading the dockerpipe configuration file.

The file holds two tables, `[runner]` and `[docker]`. This module parses the
TOML and hands back the raw tables; turning them into dataclasses is the job
of the validators module.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Tuple

from ..validation import ErrorSeverity, ValidationError, handle_config_error

logger = logging.getLogger(__name__)

CONFIG_SECTIONS = ("runner", "docker")

RawTable = Dict[str, Any]


def read_config_tables(config_path: Path) -> Tuple[RawTable, RawTable]:
    """
    Parse config.toml and return its `[runner]` and `[docker]` tables.

    Absent tables come back empty so every setting falls back to its
    default. Unknown top-level keys are reported and otherwise ignored.

    Args:
        config_path: Path to config.toml

    Returns:
        The (runner, docker) tables

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
        ValidationError: If a known section is not a table
    """
    if not config_path.is_file():
        raise FileNotFoundError(f"dockerpipe configuration not found: {config_path}")

    logger.info(f"Reading configuration from {config_path}")
    try:
        document = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {config_path.name}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise

    for key in sorted(set(document) - set(CONFIG_SECTIONS)):
        logger.warning(f"Ignoring unknown configuration section '{key}' in {config_path}")

    tables = []
    for section in CONFIG_SECTIONS:
        table = document.get(section, {})
        if not isinstance(table, dict):
            raise ValidationError(
                f"'{section}' must be a table, got {type(table).__name__}",
                field_name=section,
                value=table,
            )
        tables.append(table)

    runner_table, docker_table = tables
    return runner_table, docker_table
