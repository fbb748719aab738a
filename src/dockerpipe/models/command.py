"""
Command invocation data models.

These structures describe a single invocation of the external tool: what to
launch, each line it produced, and the final outcome of the run.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Type

from ..validation import ContentError

# A consumer of status lines. Invoked synchronously, in order per stream.
StatusSink = Callable[[str], None]


@dataclass(frozen=True)
class CommandSpec:
    """
    Description of a process to launch.
    """

    # Executable name (looked up on PATH) or path.
    executable: str
    # Single argument string, already quoted by the caller. Never shell-expanded.
    arguments: str = field(default="", repr=False)
    # Directory to launch in; None inherits the caller's working directory.
    working_directory: Optional[Path] = None
    # Argument string shown in logs instead of ``arguments`` (credentials masked).
    display_arguments: Optional[str] = field(default=None, compare=False)

    def describe(self) -> str:
        """Return the command line as it should appear in a log."""
        shown = self.arguments if self.display_arguments is None else self.display_arguments
        return f"{self.executable} {shown}".strip()


@dataclass(frozen=True)
class LineEvent:
    """One line of output delivered by the runner."""

    text: str
    is_error_stream: bool


@dataclass(frozen=True)
class CommandResult:
    """
    Final outcome of one orchestrated operation.

    ``succeeded`` is derived from the streamed content, not from
    ``exit_code``: the external tool can exit 0 after logging a fatal error.
    """

    # Name of the operation that produced this result (e.g. "build").
    operation: str
    # Exit status reported by the process.
    exit_code: int
    # False when the error marker was seen (or, for probes, stderr was written).
    succeeded: bool
    # The remembered error line; the last matching line wins.
    error_message: Optional[str] = None
    # Wall-clock time between launch and final drain.
    duration_seconds: float = 0.0
    # Exception raised by raise_for_failure(); set from the operation table.
    error_class: Type[ContentError] = field(default=ContentError, repr=False, compare=False)

    def __bool__(self) -> bool:
        return self.succeeded

    def raise_for_failure(self) -> "CommandResult":
        """
        Raise ``ContentError`` if the operation failed, else return self.

        The exception type is ``error_class``; the version check uses
        ``ToolVersionCheckFailure``.

        Raises:
            ContentError: carrying the recorded error message
        """
        if not self.succeeded:
            message = self.error_message or f"{self.operation} failed with exit code {self.exit_code}"
            raise self.error_class(message, operation=self.operation)
        return self
