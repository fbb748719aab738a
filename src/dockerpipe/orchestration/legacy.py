"""
Compatibility entry points with the original per-operation failure contracts.

CommandOrchestrator reports every outcome as a CommandResult. Existing
callers expect the older, asymmetric contracts, which these functions
reproduce on top of it:

- the installation check and push return a boolean;
- build and login raise ContentError.

Launch failures always propagate unchanged. Any other unexpected error is
logged, then re-raised by the raising operations or turned into False by the
boolean ones.
"""

import logging
from typing import Optional

from ..models.command import StatusSink
from ..validation import ErrorSeverity, LaunchFailure, handle_error
from .orchestrator import CommandOrchestrator

logger = logging.getLogger(__name__)


def _orchestrator(orchestrator: Optional[CommandOrchestrator]) -> CommandOrchestrator:
    return orchestrator if orchestrator is not None else CommandOrchestrator()


async def docker_setup_and_installation_check(
    orchestrator: Optional[CommandOrchestrator] = None,
) -> bool:
    """Write the Dockerfile if needed and probe the tool's version.

    Returns:
        True if the probe produced no stderr output, False if it did or the
        check could not be completed
    """
    try:
        result = await _orchestrator(orchestrator).check_installation()
    except LaunchFailure:
        raise
    except Exception as e:
        handle_error(
            e, "docker installation check", severity=ErrorSeverity.ERROR, reraise=False, logger=logger
        )
        return False

    if not result.succeeded:
        logger.error(result.error_message)
        return False
    return True


async def docker_build(
    registry: str,
    image_repo: str,
    tag: str,
    on_status_update: StatusSink,
    orchestrator: Optional[CommandOrchestrator] = None,
) -> None:
    """Build an image.

    Raises:
        ContentError: With the last streamed line containing the error marker
    """
    try:
        result = await _orchestrator(orchestrator).build(registry, image_repo, tag, on_status_update)
    except LaunchFailure:
        raise
    except Exception as e:
        handle_error(e, "docker build", severity=ErrorSeverity.ERROR, reraise=True, logger=logger)
        raise
    result.raise_for_failure()


async def docker_push(
    registry: str,
    image_repo: str,
    tag: str,
    on_status_update: StatusSink,
    orchestrator: Optional[CommandOrchestrator] = None,
) -> bool:
    """Push an image.

    Returns:
        True on success, False if the error marker was seen or the push
        could not be completed
    """
    try:
        result = await _orchestrator(orchestrator).push(registry, image_repo, tag, on_status_update)
    except LaunchFailure:
        raise
    except Exception as e:
        handle_error(e, "docker push", severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
        return False

    if not result.succeeded:
        logger.error(result.error_message)
        return False
    return True


async def login_container_registry(
    registry_url: str,
    repo_username: str,
    repo_password_token: str,
    on_status_update: StatusSink,
    orchestrator: Optional[CommandOrchestrator] = None,
) -> None:
    """Log in to a container registry, streaming prefixed status lines.

    Raises:
        ContentError: With the last streamed line containing the error marker
    """
    try:
        result = await _orchestrator(orchestrator).login(
            registry_url, repo_username, repo_password_token, on_status_update
        )
    except LaunchFailure:
        raise
    except Exception as e:
        handle_error(e, "registry login", severity=ErrorSeverity.ERROR, reraise=True, logger=logger)
        raise
    result.raise_for_failure()
