"""
PESL Language Errors

Defines exception classes raised by the tokenizer, parser and evaluator.
"""

from typing import Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .compiler.tokens import Token
    from .api.types import PESLObject


class PESLError(Exception):
    """Base exception for all PESL language errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TokenizeError(PESLError):
    """Raised when the tokenizer meets input it cannot split into tokens."""

    def __init__(self, message: str, index: int):
        self.index = index
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (at index {self.index})"


class ParseError(PESLError):
    """Raised when a token sequence does not form a statement."""

    def __init__(self, message: str, token: 'Token'):
        self.token = token
        super().__init__(message)

    @property
    def start(self) -> int:
        return self.token.start

    @property
    def end(self) -> int:
        return self.token.end

    def __str__(self) -> str:
        return f"{self.message} (at token {self.token} [{self.start}, {self.end}])"


class EvalError(PESLError):
    """
    Raised while evaluating a statement.

    The payload is the PESL object describing the failure; plain strings
    are wrapped into string objects.
    """

    def __init__(self, payload: 'PESLObject'):
        from .api.types import PESLObject
        if isinstance(payload, str):
            payload = PESLObject.string(payload)
        self.payload = payload
        super().__init__(payload.stringify())


class ArityError(EvalError):
    """Raised when a function receives an argument count outside its range."""

    def __init__(self, minimum: int, maximum: Optional[int], actual: int):
        self.minimum = minimum
        self.maximum = maximum
        self.actual = actual
        if maximum is None:
            expected = f"at least {minimum}"
        elif minimum == maximum:
            expected = f"exactly {minimum}"
        else:
            expected = f"between {minimum} and {maximum}"
        super().__init__(f"Expected {expected} arguments, got {actual}")


class ExitRequest(Exception):
    """
    Raised by the exit() native to unwind evaluation.

    The statement driver turns it into an ``Exited`` outcome; it is never
    reported as an error.
    """

    def __init__(self, code: int):
        self.code = code
        super().__init__(f"exit({code})")


def validate_argument_count(arguments: Sequence, minimum: int,
                            maximum: Optional[int]) -> None:
    """
    Check that an argument list length lies in the inclusive range.

    Args:
        arguments: Evaluated call arguments
        minimum: Fewest arguments accepted
        maximum: Most arguments accepted, or None for no upper bound

    Raises:
        ArityError: If the count is out of range
    """
    count = len(arguments)
    if count < minimum or (maximum is not None and count > maximum):
        raise ArityError(minimum, maximum, count)
