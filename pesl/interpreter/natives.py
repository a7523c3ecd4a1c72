"""
Host Functions

The two native functions every interpreter namespace starts with:
println([arg]) and exit([code]).
"""

import sys
import logging
from typing import List, Optional, TextIO
import numpy as np

from ..api.context import Context
from ..api.types import PESLObject, PESLFunction, UNDEFINED
from ..errors import ExitRequest, validate_argument_count

logger = logging.getLogger(__name__)

INT_MIN = np.iinfo(np.int32).min
INT_MAX = np.iinfo(np.int32).max


def make_println(stdout: Optional[TextIO] = None) -> PESLFunction:
    """Create println, writing to ``stdout`` or the current sys.stdout."""

    def println(arguments: List[PESLObject], receiver: Optional[PESLObject]) -> PESLObject:
        validate_argument_count(arguments, 0, 1)
        stream = stdout if stdout is not None else sys.stdout
        if arguments:
            stream.write(arguments[0].stringify() + "\n")
        else:
            stream.write("\n")
        return UNDEFINED

    return PESLFunction.native("println", println)


def make_exit() -> PESLFunction:
    """Create exit, which unwinds evaluation with the requested code."""

    def exit_(arguments: List[PESLObject], receiver: Optional[PESLObject]) -> PESLObject:
        validate_argument_count(arguments, 0, 1)
        code = to_exit_code(arguments[0].as_number()) if arguments else 0
        raise ExitRequest(code)

    return PESLFunction.native("exit", exit_)


def to_exit_code(value: np.float64) -> int:
    """Truncate a number to a 32-bit process exit code."""
    if np.isnan(value):
        return 0
    return int(np.trunc(np.clip(value, INT_MIN, INT_MAX)))


def build_namespace(stdout: Optional[TextIO] = None) -> Context:
    """
    Create a fresh top-level namespace with the host functions installed.

    Args:
        stdout: Stream println writes to; defaults to sys.stdout at call time

    Returns:
        The Context every statement of the run will share
    """
    context = Context()
    context.let_key("println", PESLObject.function(make_println(stdout)))
    context.let_key("exit", PESLObject.function(make_exit()))
    logger.debug("Namespace ready with natives: %s", ", ".join(context.keys()))
    return context
