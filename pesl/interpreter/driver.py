"""
PESL Statement Driver

Turns a source buffer into a sequence of fully evaluated top-level
statements against a shared Context. Used by both the batch runner and
the REPL.
"""

import logging
from typing import Callable, Optional

from ..api.context import Context
from ..api.types import PESLObject
from ..compiler import Parser, TokenStream, tokenize
from ..errors import EvalError, ExitRequest, ParseError, TokenizeError
from .results import Completed, EvalFailure, Exited, Outcome, ParseFailure, TokenizeFailure

logger = logging.getLogger(__name__)


class StatementDriver:
    """
    Tokenizes a buffer once, then parses and evaluates one statement at a
    time until the stream is exhausted or a statement fails.

    Example:
        driver = StatementDriver()
        outcome = driver.run("let x = 1 println(x)", ctx, fatal=True)
    """

    def __init__(self,
                 tokenizer: Callable[[str], TokenStream] = tokenize,
                 parser: Optional[Parser] = None):
        """
        Initialize the driver.

        Args:
            tokenizer: Function turning text into a TokenStream
            parser: Parser whose parse_next reads one statement
        """
        self.tokenizer = tokenizer
        self.parser = parser or Parser()

    def run(self, source: str, context: Context, *, fatal: bool,
            on_value: Optional[Callable[[PESLObject], None]] = None) -> Outcome:
        """
        Run every statement in a source buffer.

        Args:
            source: Text to tokenize and run
            context: Namespace shared with every other run of the session
            fatal: Flag stored on any failure returned
            on_value: Called with each statement's value as soon as it is
                evaluated

        Returns:
            Completed, Exited, or the first failure met
        """
        try:
            tokens = self.tokenizer(source)
        except TokenizeError as e:
            logger.debug("Tokenize failed at index %d: %s", e.index, e.message)
            return TokenizeFailure(e.message, e.index, fatal)

        logger.debug("Tokenized %d characters into %d tokens", len(source), len(tokens))

        count = 0
        value = None
        while tokens.has_any():
            try:
                statement = self.parser.parse_next(tokens)
            except ParseError as e:
                logger.debug("Parse failed after %d statements", count)
                return ParseFailure(e.message, e.token, fatal)
            except RecursionError:
                logger.debug("Parse nesting overflowed after %d statements", count)
                return ParseFailure("Maximum nesting depth exceeded",
                                    tokens.peek() or tokens.last(), fatal)
            if statement is None:
                break

            try:
                value = statement.evaluate(context)
                count += 1
                if on_value is not None:
                    on_value(value)
            except EvalError as e:
                logger.debug("Evaluation failed after %d statements", count)
                return EvalFailure(e.payload, fatal)
            except ExitRequest as e:
                logger.debug("exit(%d) requested after %d statements", e.code, count)
                return Exited(e.code)
            except RecursionError:
                logger.debug("Evaluation overflowed after %d statements", count)
                return EvalFailure(PESLObject.string("Maximum recursion depth exceeded"), fatal)

        return Completed(count, value)
