"""
PESL - P0nki's Epic Scripting Language

A command-line interpreter and REPL for PESL.

Example:
    import pesl

    ctx = pesl.build_namespace()
    outcome = pesl.StatementDriver().run('''
        let greet = function(name) { return "hello " + name }
        println(greet("world"))
    ''', ctx, fatal=True)
"""

import logging

__version__ = "0.1.0"
__author__ = "PESL Team"

from .api import Context, PESLObject, PESLFunction, ObjectType
from .compiler import tokenize, Parser
from .errors import PESLError, TokenizeError, ParseError, EvalError, ArityError
from .interpreter import StatementDriver, build_namespace, run_batch, Repl

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Driver
    'StatementDriver',
    'build_namespace',
    'run_batch',
    'Repl',

    # Objects
    'Context',
    'PESLObject',
    'PESLFunction',
    'ObjectType',

    # Compiler
    'tokenize',
    'Parser',

    # Errors
    'PESLError',
    'TokenizeError',
    'ParseError',
    'EvalError',
    'ArityError',
]
