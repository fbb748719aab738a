"""
High-level operations on the external container tool.

The CommandOrchestrator composes the CommandRunner and the stream classifier
into named operations (version check, build, push, login). Every operation
returns a CommandResult; success is decided from the streamed content, not
from the exit status.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from ..classification import StreamClassification
from ..config import get_config
from ..executor import CommandRunner
from ..models.command import CommandResult, CommandSpec, LineEvent, StatusSink
from ..models.config import DockerConfig
from .build_context import ensure_dockerfile
from .operations import get_operation

logger = logging.getLogger(__name__)


class CommandOrchestrator:
    """
    Runs named operations of the external tool and aggregates their outcome.

    The orchestrator keeps no per-run state: each call builds its own
    CommandSpec and StreamClassification, so operations can be awaited
    concurrently (e.g. with ``asyncio.gather``).
    """

    def __init__(
        self,
        docker_config: Optional[DockerConfig] = None,
        runner: Optional[CommandRunner] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            docker_config: Tool settings; loaded from the configuration file if omitted
            runner: Command runner; built from the `[runner]` settings if omitted
        """
        if docker_config is None or runner is None:
            app_config = get_config()
            docker_config = docker_config or app_config.docker
            runner = runner or CommandRunner.from_config(app_config.runner)
        self.docker_config = docker_config
        self.runner = runner

    async def run_operation(
        self,
        name: str,
        on_status: Optional[StatusSink] = None,
        working_directory: Optional[Path] = None,
        **params: str,
    ) -> CommandResult:
        """
        Run one operation from the operation table.

        Every delivered line, from either stream, is forwarded to ``on_status``
        (prefixed for operations that ask for it) and classified. The result
        is built only after the runner has drained both streams.

        Args:
            name: Operation name, e.g. "build"
            on_status: Receives every status line
            working_directory: Directory to run the tool in
            **params: Values for the operation's argument template

        Returns:
            The operation's CommandResult

        Raises:
            ValidationError: For unknown operations or bad parameters
            LaunchFailure: If the executable cannot be started
            CommandTimeout: If the runner's timeout elapsed
        """
        operation = get_operation(name)
        spec = CommandSpec(
            executable=getattr(self.docker_config, operation.executable_setting),
            arguments=operation.render(params),
            working_directory=working_directory,
            display_arguments=operation.render(params, mask_secrets=True),
        )

        prefix = ""
        if operation.prefix_status and self.docker_config.login_status_prefix:
            prefix = f"{self.docker_config.login_status_prefix} "

        classification = StreamClassification(marker=self.docker_config.error_marker)

        def on_event(event: LineEvent) -> None:
            classification.observe(event.text, event.is_error_stream)
            if on_status is not None:
                on_status(f"{prefix}{event.text}")

        start_time = time.monotonic()
        exit_code = await self.runner.run_events(spec, on_event)

        if operation.fail_on_stderr:
            error_message = classification.stderr_text
        else:
            error_message = classification.error_message

        result = CommandResult(
            operation=name,
            exit_code=exit_code,
            succeeded=error_message is None,
            error_message=error_message,
            duration_seconds=time.monotonic() - start_time,
            error_class=operation.error_class,
        )

        if result.succeeded:
            logger.info(f"Operation '{name}' succeeded ({classification.line_count} lines)")
        else:
            logger.error(f"Operation '{name}' failed: {error_message}")
        return result

    async def check_installation(self, on_status: Optional[StatusSink] = None) -> CommandResult:
        """
        Make sure the build descriptor exists and the tool answers a version probe.

        The probe fails if the tool writes anything to stderr.
        """
        ensure_dockerfile(self.docker_config.dockerfile_path)
        return await self.run_operation("version", on_status)

    async def build(
        self,
        registry: str,
        image_repo: str,
        tag: str,
        on_status: Optional[StatusSink] = None,
        context_dir: Optional[Union[str, Path]] = None,
    ) -> CommandResult:
        """Build and tag ``<registry>/<image_repo>:<tag>`` from the build context."""
        return await self.run_operation(
            "build",
            on_status,
            working_directory=Path(context_dir) if context_dir is not None else None,
            registry=registry,
            image_repo=image_repo,
            tag=tag,
        )

    async def push(
        self,
        registry: str,
        image_repo: str,
        tag: str,
        on_status: Optional[StatusSink] = None,
    ) -> CommandResult:
        """Upload ``<registry>/<image_repo>:<tag>``."""
        return await self.run_operation(
            "push", on_status, registry=registry, image_repo=image_repo, tag=tag
        )

    async def login(
        self,
        registry_url: str,
        username: str,
        password: str,
        on_status: Optional[StatusSink] = None,
    ) -> CommandResult:
        """
        Authenticate to a container registry.

        ``password`` is the registry password or token, not an API token of
        any other service. It is passed as a process argument and is visible
        to other users through process listings.
        """
        return await self.run_operation(
            "login",
            on_status,
            registry_url=registry_url,
            username=username,
            password=password,
        )
