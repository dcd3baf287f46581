"""
Rendering of compile errors for terminals and logs.

Author: watc developers
"""

import logging
import sys
from typing import Iterable, Optional, TextIO

from .errors import CompileError

logger = logging.getLogger(__name__)


def format_error(error: CompileError) -> str:
    """Format a single error as a diagnostic block."""
    return error.diagnostic.render()


def format_errors(errors: Iterable[CompileError]) -> str:
    """Format errors in encounter order, separated by blank lines."""
    return "\n\n".join(format_error(error) for error in errors)


def report_errors(errors: Iterable[CompileError], stream: Optional[TextIO] = None) -> int:
    """
    Write the rendered errors to a stream (stderr by default).

    Returns:
        Number of errors reported
    """
    errors = list(errors)
    if not errors:
        return 0

    stream = stream if stream is not None else sys.stderr
    for error in errors:
        logger.debug("reporting %s error: %s", error.kind, error.message)

    stream.write(format_errors(errors))
    stream.write("\n")
    return len(errors)
