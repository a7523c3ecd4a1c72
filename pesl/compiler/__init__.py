"""
PESL Compiler Package

Tokenizer, parser and syntax tree for the PESL scripting language.
Source text becomes a TokenStream, which the parser turns into one
evaluatable statement per call.
"""

from .tokens import Token, TokenType, TokenStream
from .lexer import Lexer, tokenize
from .ast import Node, Expression, Statement
from .parser import Parser

__all__ = [
    "Token",
    "TokenType",
    "TokenStream",
    "Lexer",
    "tokenize",
    "Node",
    "Expression",
    "Statement",
    "Parser",
]


def parse_all(source: str) -> list:
    """
    Tokenize and parse a whole buffer without evaluating it.

    Args:
        source: PESL source code string

    Returns:
        List of statement nodes in source order

    Raises:
        TokenizeError: If tokenization fails
        ParseError: If any statement fails to parse
    """
    tokens = tokenize(source)
    parser = Parser()
    statements = []
    while tokens.has_any():
        statement = parser.parse_next(tokens)
        if statement is not None:
            statements.append(statement)
    return statements
