"""
Platform-level process helpers.

This module covers the parts of launching and stopping the external tool
that differ between operating systems: turning a single argument string into
a launchable command, quoting values for that command line, and tearing down
a process together with everything it spawned.
"""

import logging
import os
import shlex
import shutil
import subprocess
from typing import List, Optional, Union

import psutil

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"

# Seconds to wait after SIGTERM before escalating to SIGKILL.
GRACEFUL_TERMINATION_TIMEOUT = 3.0
FORCE_TERMINATION_TIMEOUT = 2.0


def check_executable_available(executable: str) -> bool:
    """Check if an executable is available on PATH (or is an existing path).

    Returns:
        True if the executable can be resolved, False otherwise.
    """
    return shutil.which(executable) is not None


def quote_argument(value: str) -> str:
    """Quote a single value for inclusion in an argument string.

    POSIX argument strings are tokenised with ``shlex``; Windows argument
    strings are handed to ``CreateProcess`` and follow the MSVC rules.
    """
    if IS_WINDOWS:
        return subprocess.list2cmdline([value])
    return shlex.quote(value)


def build_popen_args(executable: str, arguments: str) -> Union[str, List[str]]:
    """Build the ``args`` value for ``subprocess.Popen`` with ``shell=False``.

    On POSIX the argument string is tokenised (quotes honoured, no variable
    or glob expansion). On Windows the argument string is appended verbatim
    to the quoted executable.

    Raises:
        ValueError: If the argument string has unbalanced quotes.
    """
    if IS_WINDOWS:
        command_line = subprocess.list2cmdline([executable])
        return f"{command_line} {arguments}".rstrip()
    return [executable] + shlex.split(arguments)


def creation_flags() -> int:
    """Process creation flags that keep the child off the parent's console."""
    if IS_WINDOWS:
        return subprocess.CREATE_NO_WINDOW
    return 0


def terminate_process_tree(pid: int, name: str) -> None:
    """
    Terminate a process and all of its descendants.

    Sends SIGTERM to the whole tree, waits, then SIGKILLs whatever is left.
    Processes that vanish during the walk are ignored.

    Args:
        pid: Process ID of the tree root
        name: Human-readable name used in log messages
    """
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        logger.info(f"Process {name} (PID: {pid}) already terminated")
        return

    try:
        children = parent.children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        children = []

    processes = [parent] + children
    logger.info(f"Terminating {name} (PID: {pid}) and {len(children)} children")

    for process in processes:
        try:
            process.terminate()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            logger.warning(f"Access denied sending SIGTERM to PID {process.pid}")

    _, alive = psutil.wait_procs(processes, timeout=GRACEFUL_TERMINATION_TIMEOUT)
    if not alive:
        return

    logger.warning(f"{len(alive)} processes of {name} survived SIGTERM, killing")
    for process in alive:
        try:
            process.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            logger.warning(f"Access denied sending SIGKILL to PID {process.pid}")

    _, alive = psutil.wait_procs(alive, timeout=FORCE_TERMINATION_TIMEOUT)
    for process in alive:
        logger.error(f"Failed to terminate PID {process.pid} of {name}")


def describe_process(pid: int) -> Optional[str]:
    """Return ``name (status)`` for a live PID, or None if it is gone."""
    try:
        process = psutil.Process(pid)
        return f"{process.name()} ({process.status()})"
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return None
