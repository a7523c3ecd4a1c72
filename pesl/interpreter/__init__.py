"""
PESL Interpreter

The execution driver shared by batch mode and the REPL, the two runners
built on it, and the host functions installed into every namespace.
"""

from .driver import StatementDriver
from .natives import build_namespace
from .loader import load_sources, LoaderError, FileValidationError, FileReadError
from .batch import run_batch
from .repl import Repl
from .results import Completed, Exited, TokenizeFailure, ParseFailure, EvalFailure

__all__ = [
    'StatementDriver',
    'build_namespace',
    'load_sources',
    'LoaderError',
    'FileValidationError',
    'FileReadError',
    'run_batch',
    'Repl',
    'Completed',
    'Exited',
    'TokenizeFailure',
    'ParseFailure',
    'EvalFailure',
]
