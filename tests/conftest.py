"""
Pytest configuration and shared fixtures for the dockerpipe test suite.

This module provides common fixtures, most importantly a stand-in for the
external `docker` executable that behaves like the real tool's output
(including logging an ERROR line and still exiting 0).
"""

import shlex
import sys

import pytest

from dockerpipe.executor import CommandRunner
from dockerpipe.models import CommandSpec, DockerConfig
from dockerpipe.orchestration import CommandOrchestrator


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Fake external tool
# ============================================================================

# Behaviour keyed on the sub-command and on the image reference / password:
# references containing "broken" log ERROR lines (but exit 0), the password
# "bad" is rejected, and FAKE_DOCKER_VERSION_ERROR makes the version check fail.
FAKE_DOCKER_SOURCE = r'''
import json
import os
import sys
import time


def out(message):
    print(message, flush=True)


def err(message):
    print(message, file=sys.stderr, flush=True)


args = sys.argv[1:]
command = args[0] if args else ""
out("argv: " + json.dumps(args))

if command == "--version":
    if os.environ.get("FAKE_DOCKER_VERSION_ERROR"):
        err("Cannot connect to the Docker daemon at unix:///var/run/docker.sock")
        sys.exit(1)
    out("Docker version 24.0.7, build afdd53b")
elif command == "build":
    reference = args[2]
    out("Step 1/3 : FROM ubuntu:bionic")
    if "broken" in reference:
        err("#5 ERROR: failed to compute cache key: first")
        out("Step 2/3 : still logging after the error")
        err("#6 ERROR: failed to solve: last")
    out("Step 3/3 : ENTRYPOINT")
    out("Successfully tagged " + reference)
elif command == "push":
    reference = args[1]
    out("The push refers to repository [" + reference + "]")
    for layer in range(3):
        time.sleep(0.02)
        out("layer%d: Pushed" % layer)
    if "broken" in reference:
        err("ERROR: denied: requested access to the resource is denied")
    out("digest: sha256:0123 size: 1234")
elif command == "login":
    password = args[4]
    if password == "bad":
        err("Error response from daemon: ERROR: unauthorized: incorrect username or password")
        sys.exit(1)
    out("Login Succeeded")
else:
    err("unknown command: " + command)
    sys.exit(2)
'''


@pytest.fixture
def fake_docker(tmp_path):
    """Write an executable fake `docker` into the temp dir and return its path."""
    script = tmp_path / "fake-docker"
    script.write_text(f"#!{sys.executable}\n{FAKE_DOCKER_SOURCE}", encoding="utf-8")
    script.chmod(0o755)
    return script


@pytest.fixture
def docker_config(fake_docker, tmp_path):
    """DockerConfig pointing every operation at the fake tool."""
    return DockerConfig(
        executable=str(fake_docker),
        version_check_executable=str(fake_docker),
        dockerfile_path=tmp_path / "context" / "Dockerfile",
    )


@pytest.fixture
def runner():
    """A runner with a short poll interval to keep tests fast."""
    return CommandRunner(poll_interval=0.01)


@pytest.fixture
def orchestrator(docker_config, runner):
    return CommandOrchestrator(docker_config=docker_config, runner=runner)


def _python_spec(script: str, *extra_args: str, working_directory=None) -> CommandSpec:
    arguments = " ".join(["-u", "-c", shlex.quote(script)] + [shlex.quote(a) for a in extra_args])
    return CommandSpec(
        executable=sys.executable,
        arguments=arguments,
        working_directory=working_directory,
    )


@pytest.fixture
def python_spec():
    """Factory for CommandSpecs that run an inline Python script under the current interpreter."""
    return _python_spec


@pytest.fixture(autouse=True)
def clear_config_after_test(monkeypatch):
    """Restore the configuration singleton and its path after each test."""
    from dockerpipe.config import manager

    monkeypatch.setattr(manager, "_CONFIG_FILE_PATH", manager._CONFIG_FILE_PATH)
    monkeypatch.setattr(manager, "_CONFIG", None)
    yield
