"""
Statement Driver Outcomes

A driver run ends in exactly one of these values. Failures carry a
``fatal`` flag chosen by the caller: batch mode stops the process on
them, the REPL reports them and moves on to the next line.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from ..api.types import PESLObject
from ..compiler.tokens import Token


@dataclass(frozen=True)
class Completed:
    """The token stream was exhausted without error."""
    statements: int
    last_value: Optional[PESLObject] = None


@dataclass(frozen=True)
class Exited:
    """A statement called exit(); the process should end with ``code``."""
    code: int


@dataclass(frozen=True)
class TokenizeFailure:
    """The buffer could not be tokenized; nothing ran."""
    message: str
    index: int
    fatal: bool

    def report(self) -> List[str]:
        return [self.message, f"At index {self.index}"]


@dataclass(frozen=True)
class ParseFailure:
    """A statement failed to parse; earlier statements already ran."""
    message: str
    token: Token
    fatal: bool

    def report(self) -> List[str]:
        return [self.message, f"At token {self.token} [{self.token.start}, {self.token.end}]"]


@dataclass(frozen=True)
class EvalFailure:
    """A statement raised during evaluation; earlier statements already ran."""
    payload: PESLObject
    fatal: bool

    def report(self) -> List[str]:
        return [self.payload.stringify()]


Failure = Union[TokenizeFailure, ParseFailure, EvalFailure]
Outcome = Union[Completed, Exited, TokenizeFailure, ParseFailure, EvalFailure]


def is_failure(outcome: Outcome) -> bool:
    """Check whether an outcome is one of the failure variants."""
    return isinstance(outcome, (TokenizeFailure, ParseFailure, EvalFailure))
