"""
Batch Runner

Runs one or more source files to completion. Every failure is fatal.
"""

import sys
import logging
from typing import Optional, Sequence, TextIO

from ..api.context import Context
from ..config import Settings
from .driver import StatementDriver
from .loader import LoaderError, load_sources
from .results import Completed, Exited

logger = logging.getLogger(__name__)


def run_batch(paths: Sequence[str], context: Context,
              driver: Optional[StatementDriver] = None,
              settings: Optional[Settings] = None,
              stderr: Optional[TextIO] = None) -> int:
    """
    Load the given files and run them as a single buffer.

    Args:
        paths: Source files, in the order their statements should run
        context: The namespace for the whole run
        driver: Statement driver to use
        settings: Interpreter settings (source encoding)
        stderr: Stream for diagnostics; defaults to sys.stderr

    Returns:
        Process exit code: 0 on success, 1 on any failure, or the code
        passed to exit()
    """
    driver = driver or StatementDriver()
    settings = settings or Settings()
    stderr = stderr if stderr is not None else sys.stderr

    try:
        source = load_sources(paths, encoding=settings.encoding,
                              suffix=settings.source_suffix)
    except LoaderError as e:
        print(e.message, file=stderr)
        return 1

    outcome = driver.run(source, context, fatal=True)

    if isinstance(outcome, Completed):
        logger.debug("Batch finished after %d statements", outcome.statements)
        return 0
    if isinstance(outcome, Exited):
        return outcome.code

    for line in outcome.report():
        print(line, file=stderr)
    if outcome.fatal:
        return 1
    logger.debug("Ignoring non-fatal failure")
    return 0
