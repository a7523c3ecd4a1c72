"""
PESL REPL

Reads one line at a time, runs it against a session-long Context and
echoes each statement's value. Failures only cost the rest of the line.
"""

import sys
import logging
from typing import Optional, TextIO

from .. import __version__
from ..api.context import Context
from ..api.types import PESLObject
from ..config import PROMPT
from .driver import StatementDriver
from .results import Exited, is_failure

logger = logging.getLogger(__name__)


class Repl:
    """
    Interactive read-eval-print loop.

    Example:
        repl = Repl(build_namespace())
        code = repl.run()
    """

    def __init__(self,
                 context: Context,
                 driver: Optional[StatementDriver] = None,
                 stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None,
                 prompt: str = PROMPT):
        """
        Initialize the REPL.

        Args:
            context: Namespace shared by every line of the session
            driver: Statement driver to use
            stdin: Line source; defaults to sys.stdin
            stdout: Prompt and echo stream; defaults to sys.stdout
            stderr: Diagnostics stream; defaults to sys.stderr
            prompt: Text written before each line is read
        """
        self.context = context
        self.driver = driver or StatementDriver()
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.prompt = prompt
        self.lines = 0

    def run(self) -> int:
        """
        Run until exit() is called or input ends.

        Returns:
            The code passed to exit(), or 0 at end of input
        """
        self.stdout.write(f"PESL {__version__}\n")

        while True:
            self.stdout.write(self.prompt)
            self.stdout.flush()

            line = self.stdin.readline()
            if not line:
                self.stdout.write("\n")
                logger.debug("End of input after %d lines", self.lines)
                return 0

            self.lines += 1
            code = self.run_line(line.rstrip("\r\n"))
            if code is not None:
                return code

    def run_line(self, line: str) -> Optional[int]:
        """
        Run a single line, echoing values and reporting failures.

        Returns:
            An exit code if the line called exit() or failed fatally,
            otherwise None
        """
        outcome = self.driver.run(line, self.context, fatal=False, on_value=self.echo)

        if isinstance(outcome, Exited):
            return outcome.code
        if is_failure(outcome):
            for message in outcome.report():
                print(message, file=self.stderr)
            if outcome.fatal:
                return 1
        return None

    def echo(self, value: PESLObject) -> None:
        self.stdout.write(value.stringify() + "\n")
