"""
Content-based failure detection for streamed tool output.

The external tool's exit status is not a reliable failure signal: it can log
a fatal build error and still exit 0. Failure is therefore detected from the
text of the streamed lines. Classification is a fold over the line sequence
producing the last line that contained the error marker.
"""

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MARKER = "ERROR"


def classify(
    line: str,
    previous_error_message: Optional[str],
    marker: str = DEFAULT_ERROR_MARKER,
) -> Optional[str]:
    """Return the error message remembered after seeing ``line``.

    If ``line`` contains ``marker`` (case-sensitive substring match) it
    replaces any previously remembered message; otherwise the previous
    message is returned unchanged.

    Args:
        line: One delivered line of output.
        previous_error_message: Message remembered so far, or None.
        marker: Substring that flags a failure.

    Returns:
        The new remembered error message.

    Examples:
        >>> classify("#5 ERROR: failed to solve", None)
        '#5 ERROR: failed to solve'
        >>> classify("Step 2/5 : WORKDIR /root/", "ERROR: old")
        'ERROR: old'
        >>> classify("error: lowercase is ignored", None) is None
        True
    """
    if marker in line:
        return line
    return previous_error_message


def fold_error_message(
    lines: Iterable[str], marker: str = DEFAULT_ERROR_MARKER
) -> Optional[str]:
    """Fold ``classify`` over ``lines``; the last matching line wins."""
    return reduce(lambda previous, line: classify(line, previous, marker), lines, None)


@dataclass
class StreamClassification:
    """
    Per-invocation accumulator for one run of the external tool.

    Each orchestrated operation creates its own instance, so concurrent
    operations never share a remembered message.
    """

    marker: str = DEFAULT_ERROR_MARKER
    error_message: Optional[str] = None
    stderr_lines: List[str] = field(default_factory=list)
    line_count: int = 0

    def observe(self, line: str, is_error_stream: bool = False) -> None:
        """Record one delivered line."""
        self.line_count += 1
        if is_error_stream:
            self.stderr_lines.append(line)
        self.error_message = classify(line, self.error_message, self.marker)
        if self.error_message is line:
            logger.debug(f"Error marker '{self.marker}' found: {line}")

    @property
    def has_error(self) -> bool:
        return self.error_message is not None

    @property
    def stderr_text(self) -> Optional[str]:
        """All stderr lines joined by newlines, or None if there were none."""
        if not self.stderr_lines:
            return None
        return "\n".join(self.stderr_lines)
