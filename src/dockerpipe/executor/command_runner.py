"""
Asynchronous command runner with line streaming.

This module launches the external tool with both output streams redirected,
pumps each stream into its own thread-safe FIFO queue from a dedicated reader
thread, and drains the queues from a cooperative polling loop on the event
loop. Control returns to the caller only after the process has exited and
every buffered line has been delivered.
"""

import asyncio
import logging
import queue
import subprocess
import threading
import time
from typing import Callable, IO, Optional

from ..models.command import CommandSpec, LineEvent, StatusSink
from ..models.config import RunnerConfig
from ..validation import (
    CommandTimeout,
    ErrorSeverity,
    LaunchFailure,
    ValidationError,
    handle_error,
    handle_subprocess_error,
)
from .process_control import (
    build_popen_args,
    creation_flags,
    describe_process,
    terminate_process_tree,
)

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1

# After exit, how long to keep waiting for the pipes to reach EOF. A
# grandchild that inherited the pipes can hold them open indefinitely.
READER_EOF_TIMEOUT = 5.0

LineEventHandler = Callable[[LineEvent], None]


def _pump_stream(stream: IO[str], lines: "queue.Queue[str]") -> None:
    """Reader thread body: enqueue every line until EOF."""
    try:
        for line in iter(stream.readline, ""):
            lines.put(line.rstrip("\r\n"))
    finally:
        stream.close()


class CommandRunner:
    """
    Runs one external command per call and streams its output line by line.

    A runner holds only settings; every call to :meth:`run` gets its own
    process, queues and reader threads, so one runner can serve concurrent
    invocations.
    """

    def __init__(
        self,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the command runner.

        Args:
            poll_interval: Seconds between liveness checks and queue drains
            timeout: Seconds before the process tree is killed; None waits forever
        """
        self.poll_interval = poll_interval
        self.timeout = timeout

    @classmethod
    def from_config(cls, runner_config: RunnerConfig) -> "CommandRunner":
        return cls(
            poll_interval=runner_config.poll_interval_seconds,
            timeout=runner_config.timeout_seconds,
        )

    async def run(
        self,
        spec: CommandSpec,
        on_output_line: Optional[StatusSink] = None,
        on_error_line: Optional[StatusSink] = None,
    ) -> int:
        """
        Run a command, delivering stdout and stderr lines to separate callbacks.

        Empty and whitespace-only lines are dropped. Within each stream lines
        arrive in the order the process wrote them; ordering across the two
        streams is best-effort.

        Args:
            spec: What to launch
            on_output_line: Receives each stdout line
            on_error_line: Receives each stderr line

        Returns:
            The process exit code

        Raises:
            LaunchFailure: If the executable is missing or cannot start
            CommandTimeout: If the configured timeout elapsed
        """
        def dispatch(event: LineEvent) -> None:
            callback = on_error_line if event.is_error_stream else on_output_line
            if callback is not None:
                callback(event.text)

        return await self.run_events(spec, dispatch)

    async def run_events(self, spec: CommandSpec, on_event: LineEventHandler) -> int:
        """
        Run a command, delivering every line as a :class:`LineEvent`.

        Same contract as :meth:`run`.
        """
        process = self._launch(spec)
        name = spec.executable
        logger.info(f"Started '{spec.describe()}' with PID {process.pid}")

        output_lines: "queue.Queue[str]" = queue.Queue()
        error_lines: "queue.Queue[str]" = queue.Queue()
        readers = [
            self._start_reader(process.stdout, output_lines, f"{name}-stdout"),
            self._start_reader(process.stderr, error_lines, f"{name}-stderr"),
        ]

        def drain() -> None:
            self._drain(error_lines, True, on_event)
            self._drain(output_lines, False, on_event)

        start_time = time.monotonic()
        timed_out = False
        try:
            while process.poll() is None:
                await asyncio.sleep(self.poll_interval)
                drain()
                if self.timeout is not None and time.monotonic() - start_time > self.timeout:
                    logger.warning(
                        f"'{name}' (PID {process.pid}, {describe_process(process.pid)}) "
                        f"exceeded {self.timeout}s, terminating"
                    )
                    terminate_process_tree(process.pid, name)
                    timed_out = True
                    break

            # The process is gone but its pipes may still hold output.
            eof_deadline = time.monotonic() + READER_EOF_TIMEOUT
            while any(reader.is_alive() for reader in readers):
                if time.monotonic() > eof_deadline:
                    logger.warning(
                        f"Output pipes of '{name}' still open {READER_EOF_TIMEOUT}s after exit; "
                        f"finishing without waiting for EOF"
                    )
                    break
                await asyncio.sleep(self.poll_interval)
                drain()
            drain()
        except BaseException as e:
            # A failing callback or a cancelled task must not leave the tool running.
            if process.poll() is None:
                terminate_process_tree(process.pid, name)
            handle_error(
                error=e,
                context=f"streaming output of '{name}'",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            raise

        if timed_out:
            process.poll()
            raise CommandTimeout(name, self.timeout)

        exit_code = process.wait()
        logger.info(
            f"'{name}' exited with code {exit_code} after {time.monotonic() - start_time:.2f}s"
        )
        return exit_code

    def run_sync(
        self,
        spec: CommandSpec,
        on_output_line: Optional[StatusSink] = None,
        on_error_line: Optional[StatusSink] = None,
    ) -> int:
        """Blocking wrapper around :meth:`run` for callers without an event loop."""
        return asyncio.run(self.run(spec, on_output_line, on_error_line))

    def _launch(self, spec: CommandSpec) -> subprocess.Popen:
        """
        Start the process with both streams redirected and no shell.

        Raises:
            LaunchFailure: If the OS refuses to start the executable
            ValidationError: If the argument string cannot be tokenised
        """
        try:
            args = build_popen_args(spec.executable, spec.arguments)
        except ValueError as e:
            raise ValidationError(
                f"Cannot parse arguments for '{spec.executable}': {e}",
                field_name="arguments",
            ) from e

        try:
            return subprocess.Popen(
                args,
                cwd=spec.working_directory,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                shell=False,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,  # Line buffered
                creationflags=creation_flags(),
            )
        except OSError as e:
            handle_subprocess_error(
                e, spec.describe(), severity=ErrorSeverity.ERROR, reraise=False, logger=logger
            )
            raise LaunchFailure(spec.executable, e) from e

    @staticmethod
    def _start_reader(
        stream: Optional[IO[str]], lines: "queue.Queue[str]", thread_name: str
    ) -> threading.Thread:
        reader = threading.Thread(
            target=_pump_stream, args=(stream, lines), name=thread_name, daemon=True
        )
        reader.start()
        return reader

    @staticmethod
    def _drain(
        lines: "queue.Queue[str]", is_error_stream: bool, on_event: LineEventHandler
    ) -> None:
        """Deliver everything currently queued, in FIFO order."""
        while True:
            try:
                text = lines.get_nowait()
            except queue.Empty:
                return
            if not text.strip():
                continue
            logger.debug(f"[{'stderr' if is_error_stream else 'stdout'}] {text}")
            on_event(LineEvent(text=text, is_error_stream=is_error_stream))

