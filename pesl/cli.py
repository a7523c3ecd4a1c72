"""
PESL command line.

Selects exactly one of help, info, batch or REPL mode from the flags and
runs it against a fresh namespace.

    pesl -f main.pesl util.pesl    run files in order as one program
    pesl -r                        start a REPL (also the default)
"""

import sys
import logging
import argparse
from enum import Enum
from typing import List, Optional, TextIO

from . import __version__
from .config import Settings
from .interpreter import Repl, StatementDriver, build_namespace, run_batch

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

INFO_TEXT = """\
This is a command-line interpreter and REPL for PESL, P0nki's Epic Scripting Language.
Source code for PESL can be found here: https://github.com/jearmstrong21/PESL
Run with -h or --help for arguments help.

The context ran in this interpreter is slightly different from the default one.
You are given println([arg]), a function which takes an optional argument and directly prints it to stdout, with a newline.
You are also given exit([code]), a function which takes an optional exit code.
"""


class CLIError(Exception):
    """Base exception for command line failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UsageError(CLIError):
    """Raised when the flags cannot be parsed."""
    pass


class ArgumentConflictError(CLIError):
    """Raised when flags that select different modes are combined."""
    pass


class Mode(Enum):
    HELP = "help"
    INFO = "info"
    BATCH = "batch"
    REPL = "repl"


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad flags."""

    def error(self, message: str):
        raise UsageError(message)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="pesl",
        description="Interpreter and REPL for PESL %s." % __version__,
        add_help=False,
    )
    parser.add_argument('-h', "--help", action="store_true", help="shows this help command")
    parser.add_argument('-f', "--files", nargs="+", metavar="FILE", help="source files for interpreter")
    parser.add_argument('-r', "--repl", action="store_true", help="starts a PESL repl")
    parser.add_argument('-i', "--info", action="store_true", help="information about this interpreter")
    return parser


def resolve_mode(args: argparse.Namespace) -> Mode:
    """
    Pick the single mode the parsed flags ask for.

    Raises:
        ArgumentConflictError: If both files and the REPL are requested
    """
    if args.help:
        return Mode.HELP
    if args.info:
        return Mode.INFO
    if args.files and args.repl:
        raise ArgumentConflictError("Cannot run files and repl")
    if args.files:
        return Mode.BATCH
    return Mode.REPL


def configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("pesl").setLevel(level)


def main(argv: Optional[List[str]] = None,
         stdin: Optional[TextIO] = None,
         stdout: Optional[TextIO] = None,
         stderr: Optional[TextIO] = None,
         settings: Optional[Settings] = None) -> int:
    """
    Run the interpreter and return the process exit code.

    Args:
        argv: Arguments without the program name; defaults to sys.argv[1:]
        stdin: REPL input stream
        stdout: Program output stream
        stderr: Diagnostics stream
        settings: Configuration; read from the environment when omitted
    """
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    settings = settings or Settings.from_env()
    configure_logging(settings)

    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        mode = resolve_mode(args)
    except UsageError as e:
        print(e.message, file=stderr)
        stderr.write(parser.format_help())
        return 1
    except ArgumentConflictError as e:
        print(e.message, file=stderr)
        return 1

    logger.debug("Running in %s mode", mode.value)

    if mode == Mode.HELP:
        stdout.write(parser.format_help())
        return 0
    if mode == Mode.INFO:
        stdout.write(INFO_TEXT)
        return 0

    context = build_namespace(stdout)
    driver = StatementDriver()

    if mode == Mode.BATCH:
        return run_batch(args.files, context, driver, settings, stderr)

    repl = Repl(context, driver, stdin=stdin, stdout=stdout, stderr=stderr,
                prompt=settings.prompt)
    return repl.run()


def main_entry() -> None:
    """Console script entry point."""
    try:
        code = main()
    except KeyboardInterrupt:
        print(file=sys.stderr)
        code = 130
    sys.stdout.flush()
    sys.exit(code)
