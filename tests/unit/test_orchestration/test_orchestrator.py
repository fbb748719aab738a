"""
Unit tests for the CommandOrchestrator.

Most tests drive a fake `docker` executable (see conftest.py) through the
real CommandRunner. A few use a scripted runner to pin down exactly which
lines the classifier sees.
"""

import json
import os
from unittest.mock import patch

import pytest

from dockerpipe.models import CommandResult, DockerConfig, LineEvent
from dockerpipe.orchestration import CommandOrchestrator, DOCKERFILE_TEMPLATE
from dockerpipe.validation import (
    ContentError,
    LaunchFailure,
    ToolVersionCheckFailure,
    ValidationError,
)

pytestmark = [
    pytest.mark.unit,
    pytest.mark.skipif(os.name == "nt", reason="fake docker needs a POSIX shebang"),
]


class ScriptedRunner:
    """Runner stand-in that replays fixed events and records each CommandSpec."""

    def __init__(self, events, exit_code=0):
        self.events = events
        self.exit_code = exit_code
        self.specs = []

    async def run_events(self, spec, on_event):
        self.specs.append(spec)
        for text, is_error_stream in self.events:
            on_event(LineEvent(text=text, is_error_stream=is_error_stream))
        return self.exit_code


def _argv(lines):
    """Return the argument list the fake tool reported on its first line."""
    return json.loads(lines[0][len("argv: "):])


class TestCheckInstallation:
    """Test cases for the installation check."""

    @pytest.mark.asyncio
    async def test_success_writes_dockerfile(self, orchestrator, docker_config):
        lines = []
        result = await orchestrator.check_installation(lines.append)

        assert result.succeeded
        assert result.operation == "version"
        assert result.error_message is None
        assert "Docker version 24.0.7, build afdd53b" in lines
        assert docker_config.dockerfile_path.read_text(encoding="utf-8") == DOCKERFILE_TEMPLATE

    @pytest.mark.asyncio
    async def test_existing_dockerfile_kept(self, orchestrator, docker_config):
        docker_config.dockerfile_path.parent.mkdir(parents=True)
        docker_config.dockerfile_path.write_text("FROM scratch\n", encoding="utf-8")

        await orchestrator.check_installation()

        assert docker_config.dockerfile_path.read_text(encoding="utf-8") == "FROM scratch\n"

    @pytest.mark.asyncio
    async def test_stderr_output_fails_version_check(self, orchestrator, monkeypatch):
        monkeypatch.setenv("FAKE_DOCKER_VERSION_ERROR", "1")

        result = await orchestrator.check_installation()

        assert not result.succeeded
        assert result.exit_code == 1
        assert "Cannot connect to the Docker daemon" in result.error_message
        with pytest.raises(ToolVersionCheckFailure):
            result.raise_for_failure()

    @pytest.mark.asyncio
    async def test_version_check_fails_on_any_stderr_without_marker(self):
        runner = ScriptedRunner([("Docker version 24.0.7", False), ("warning: a", True), ("warning: b", True)])
        orchestrator = CommandOrchestrator(docker_config=DockerConfig(), runner=runner)

        with patch("dockerpipe.orchestration.orchestrator.ensure_dockerfile"):
            result = await orchestrator.check_installation()

        assert not result.succeeded
        assert result.error_message == "warning: a\nwarning: b"

    @pytest.mark.asyncio
    async def test_version_check_uses_its_own_executable(self):
        runner = ScriptedRunner([])
        config = DockerConfig(executable="docker", version_check_executable="docker.exe")
        orchestrator = CommandOrchestrator(docker_config=config, runner=runner)

        with patch("dockerpipe.orchestration.orchestrator.ensure_dockerfile"):
            await orchestrator.check_installation()

        assert runner.specs[0].executable == "docker.exe"
        assert runner.specs[0].arguments == "--version"


class TestBuild:
    """Test cases for the build operation."""

    @pytest.mark.asyncio
    async def test_successful_build(self, orchestrator, tmp_path):
        lines = []
        result = await orchestrator.build(
            "registry.example.com", "team/server", "v2", lines.append, context_dir=tmp_path
        )

        assert result.succeeded
        assert bool(result)
        assert result.exit_code == 0
        assert _argv(lines) == ["build", "-t", "registry.example.com/team/server:v2", "."]
        assert lines[-1] == "Successfully tagged registry.example.com/team/server:v2"
        assert result.raise_for_failure() is result

    @pytest.mark.asyncio
    async def test_error_marker_fails_despite_zero_exit(self, orchestrator):
        """Test that the last ERROR line is reported even though the tool exited 0."""
        lines = []
        result = await orchestrator.build("registry.example.com", "broken", "v2", lines.append)

        assert result.exit_code == 0
        assert not result.succeeded
        assert result.error_message == "#6 ERROR: failed to solve: last"
        assert "#5 ERROR: failed to compute cache key: first" in lines
        assert "Step 3/3 : ENTRYPOINT" in lines

        with pytest.raises(ContentError, match="failed to solve: last") as exc_info:
            result.raise_for_failure()
        assert exc_info.value.operation == "build"
        assert not isinstance(exc_info.value, ToolVersionCheckFailure)

    @pytest.mark.asyncio
    async def test_runs_in_context_directory(self):
        runner = ScriptedRunner([])
        orchestrator = CommandOrchestrator(docker_config=DockerConfig(), runner=runner)

        await orchestrator.build("reg", "repo", "v1", context_dir="/srv/context")

        assert str(runner.specs[0].working_directory) == "/srv/context"

    @pytest.mark.asyncio
    async def test_nonzero_exit_without_marker_succeeds(self):
        runner = ScriptedRunner([("Step 1/1 : FROM scratch", False)], exit_code=3)
        orchestrator = CommandOrchestrator(docker_config=DockerConfig(), runner=runner)

        result = await orchestrator.build("reg", "repo", "v1")

        assert result.succeeded
        assert result.exit_code == 3

    @pytest.mark.asyncio
    async def test_custom_error_marker(self):
        runner = ScriptedRunner([("ERROR: not our marker", True), ("FATAL: ours", False)])
        config = DockerConfig(error_marker="FATAL")
        orchestrator = CommandOrchestrator(docker_config=config, runner=runner)

        result = await orchestrator.build("reg", "repo", "v1")

        assert result.error_message == "FATAL: ours"

    @pytest.mark.asyncio
    async def test_launch_failure_propagates(self, tmp_path, runner):
        config = DockerConfig(executable=str(tmp_path / "missing-docker"))
        orchestrator = CommandOrchestrator(docker_config=config, runner=runner)

        with pytest.raises(LaunchFailure):
            await orchestrator.build("reg", "repo", "v1")

    @pytest.mark.asyncio
    async def test_invalid_parameter(self, orchestrator):
        with pytest.raises(ValidationError):
            await orchestrator.build("reg", "repo", "")


class TestPush:
    """Test cases for the push operation."""

    @pytest.mark.asyncio
    async def test_successful_push_streams_progress(self, orchestrator):
        lines = []
        result = await orchestrator.push("registry.example.com", "team/server", "v2", lines.append)

        assert result.succeeded
        assert _argv(lines) == ["push", "registry.example.com/team/server:v2"]
        assert [line for line in lines if line.endswith(": Pushed")] == [
            "layer0: Pushed",
            "layer1: Pushed",
            "layer2: Pushed",
        ]

    @pytest.mark.asyncio
    async def test_error_marker_fails_push(self, orchestrator):
        result = await orchestrator.push("registry.example.com", "broken", "v2")

        assert not result.succeeded
        assert result.error_message == "ERROR: denied: requested access to the resource is denied"

    @pytest.mark.asyncio
    async def test_stderr_without_marker_does_not_fail_push(self):
        runner = ScriptedRunner([("WARNING: slow network", True)])
        orchestrator = CommandOrchestrator(docker_config=DockerConfig(), runner=runner)

        result = await orchestrator.push("reg", "repo", "v1")

        assert result.succeeded


class TestLogin:
    """Test cases for the login operation."""

    @pytest.mark.asyncio
    async def test_status_lines_are_prefixed(self, orchestrator):
        lines = []
        result = await orchestrator.login("registry.example.com", "bot", "s3cret", lines.append)

        assert result.succeeded
        assert all(line.startswith("[LoginContainerRegistry] ") for line in lines)
        assert "[LoginContainerRegistry] Login Succeeded" in lines

    @pytest.mark.asyncio
    async def test_arguments_reach_tool(self, orchestrator):
        lines = []
        await orchestrator.login("registry.example.com", "bot", "p@ss word", lines.append)

        argv = json.loads(lines[0][len("[LoginContainerRegistry] argv: "):])
        assert argv == ["login", "-u", "bot", "--password", "p@ss word", "registry.example.com"]

    @pytest.mark.asyncio
    async def test_rejected_credentials(self, orchestrator):
        lines = []
        result = await orchestrator.login("registry.example.com", "bot", "bad", lines.append)

        assert not result.succeeded
        assert result.exit_code == 1
        assert "incorrect username or password" in result.error_message
        assert not result.error_message.startswith("[LoginContainerRegistry]")

    @pytest.mark.asyncio
    async def test_password_masked_in_spec_description(self):
        runner = ScriptedRunner([])
        orchestrator = CommandOrchestrator(docker_config=DockerConfig(), runner=runner)

        await orchestrator.login("registry.example.com", "bot", "s3cret")

        spec = runner.specs[0]
        assert "s3cret" in spec.arguments
        assert "s3cret" not in spec.describe()
        assert "s3cret" not in repr(spec)

    @pytest.mark.asyncio
    async def test_empty_prefix(self):
        runner = ScriptedRunner([("Login Succeeded", False)])
        config = DockerConfig(login_status_prefix="")
        orchestrator = CommandOrchestrator(docker_config=config, runner=runner)
        lines = []

        await orchestrator.login("reg", "bot", "pw", lines.append)

        assert lines == ["Login Succeeded"]


class TestRunOperation:
    """Test cases for the generic entry point."""

    @pytest.mark.asyncio
    async def test_unknown_operation(self, orchestrator):
        with pytest.raises(ValidationError):
            await orchestrator.run_operation("rmi")

    @pytest.mark.asyncio
    async def test_result_shape(self):
        orchestrator = CommandOrchestrator(
            docker_config=DockerConfig(), runner=ScriptedRunner([("ok", False)])
        )

        result = await orchestrator.run_operation(
            "push", registry="reg", image_repo="repo", tag="v1"
        )

        assert isinstance(result, CommandResult)
        assert result.operation == "push"
        assert result.duration_seconds >= 0.0

    def test_defaults_come_from_config(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            '[runner]\npoll_interval_seconds = 0.5\n\n[docker]\nexecutable = "podman"\n',
            encoding="utf-8",
        )
        from dockerpipe.config import set_config_path

        set_config_path(config_file)
        orchestrator = CommandOrchestrator()

        assert orchestrator.docker_config.executable == "podman"
        assert orchestrator.runner.poll_interval == 0.5
