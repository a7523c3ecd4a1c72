"""
PESL Token Definitions

Defines all token types, the Token class and the cursor-based TokenStream
consumed by the parser.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, List, Optional


class TokenType(Enum):
    """All token types in PESL."""

    # Literals
    NUMBER = auto()
    STRING = auto()
    IDENTIFIER = auto()

    # Keywords
    LET = auto()
    FUNCTION = auto()
    RETURN = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    TRUE = auto()
    FALSE = auto()
    UNDEFINED = auto()

    # Operators
    PLUS = auto()          # +
    MINUS = auto()         # -
    STAR = auto()          # *
    SLASH = auto()         # /
    PERCENT = auto()       # %
    BANG = auto()          # !
    AND = auto()           # &&
    OR = auto()            # ||

    # Comparison
    EQ = auto()            # ==
    NE = auto()            # !=
    LT = auto()            # <
    LE = auto()            # <=
    GT = auto()            # >
    GE = auto()            # >=

    # Assignment
    ASSIGN = auto()        # =

    # Delimiters
    LPAREN = auto()        # (
    RPAREN = auto()        # )
    LBRACE = auto()        # {
    RBRACE = auto()        # }
    LBRACKET = auto()      # [
    RBRACKET = auto()      # ]
    COMMA = auto()         # ,
    DOT = auto()           # .
    COLON = auto()         # :
    SEMICOLON = auto()     # ;


# Keyword mapping
KEYWORDS = {
    'let': TokenType.LET,
    'function': TokenType.FUNCTION,
    'return': TokenType.RETURN,
    'if': TokenType.IF,
    'else': TokenType.ELSE,
    'while': TokenType.WHILE,
    'true': TokenType.TRUE,
    'false': TokenType.FALSE,
    'undefined': TokenType.UNDEFINED,
}


@dataclass
class Token:
    """A single token and the character span [start, end) it was read from."""

    type: TokenType
    lexeme: str
    value: Any
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.type.name}({self.lexeme!r})"


class TokenStream:
    """
    Ordered tokens from one text buffer, consumed front to back.

    The stream has no end-of-input token; callers ask ``has_any()``.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.position = 0

    def has_any(self) -> bool:
        """Check if any tokens remain."""
        return self.position < len(self.tokens)

    def peek(self, offset: int = 0) -> Optional[Token]:
        """Return an upcoming token without consuming it."""
        index = self.position + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def advance(self) -> Token:
        """Consume and return the current token."""
        token = self.tokens[self.position]
        self.position += 1
        return token

    def last(self) -> Optional[Token]:
        """Return the final token of the stream, used to report end of input."""
        return self.tokens[-1] if self.tokens else None

    def remaining(self) -> int:
        return len(self.tokens) - self.position

    def __len__(self) -> int:
        return len(self.tokens)

    def __repr__(self) -> str:
        return f"TokenStream({self.position}/{len(self.tokens)})"
