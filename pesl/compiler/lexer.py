"""
PESL Lexer

Tokenizes PESL source code into a TokenStream.
"""

from typing import List
from .tokens import Token, TokenType, TokenStream, KEYWORDS
from ..errors import TokenizeError


DIGITS = '0123456789'
HEX_DIGITS = DIGITS + 'abcdefABCDEF'

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '"': '"',
    "'": "'",
}


class Lexer:
    """Lexical analyzer for PESL source code."""

    def __init__(self, source: str):
        """
        Initialize the lexer.

        Args:
            source: PESL source code to tokenize
        """
        self.source = source
        self.tokens: List[Token] = []
        self.start = 0      # Start of current token
        self.current = 0    # Current position

    def tokenize(self) -> TokenStream:
        """
        Tokenize the entire source code.

        Returns:
            TokenStream over every token in the source

        Raises:
            TokenizeError: If the source contains an invalid token
        """
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        return TokenStream(self.tokens)

    def scan_token(self) -> None:
        """Scan the next token."""
        c = self.advance()

        if c.isspace():
            return

        if c == '/':
            if self.match('/'):
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
            return

        # Single-character tokens
        if c == '(':
            self.add_token(TokenType.LPAREN)
        elif c == ')':
            self.add_token(TokenType.RPAREN)
        elif c == '{':
            self.add_token(TokenType.LBRACE)
        elif c == '}':
            self.add_token(TokenType.RBRACE)
        elif c == '[':
            self.add_token(TokenType.LBRACKET)
        elif c == ']':
            self.add_token(TokenType.RBRACKET)
        elif c == ',':
            self.add_token(TokenType.COMMA)
        elif c == '.':
            self.add_token(TokenType.DOT)
        elif c == ':':
            self.add_token(TokenType.COLON)
        elif c == ';':
            self.add_token(TokenType.SEMICOLON)
        elif c == '+':
            self.add_token(TokenType.PLUS)
        elif c == '-':
            self.add_token(TokenType.MINUS)
        elif c == '*':
            self.add_token(TokenType.STAR)
        elif c == '%':
            self.add_token(TokenType.PERCENT)

        # One or two character operators
        elif c == '=':
            self.add_token(TokenType.EQ if self.match('=') else TokenType.ASSIGN)
        elif c == '!':
            self.add_token(TokenType.NE if self.match('=') else TokenType.BANG)
        elif c == '<':
            self.add_token(TokenType.LE if self.match('=') else TokenType.LT)
        elif c == '>':
            self.add_token(TokenType.GE if self.match('=') else TokenType.GT)
        elif c == '&' and self.match('&'):
            self.add_token(TokenType.AND)
        elif c == '|' and self.match('|'):
            self.add_token(TokenType.OR)

        # String literals
        elif c == '"' or c == "'":
            self.string(c)

        # Numbers
        elif c in DIGITS:
            self.number()

        # Identifiers and keywords
        elif c.isalpha() or c == '_':
            self.identifier()

        else:
            raise TokenizeError(f"Unexpected character {c!r}", self.start)

    def advance(self) -> str:
        """Consume and return the current character."""
        c = self.source[self.current]
        self.current += 1
        return c

    def peek(self) -> str:
        """Return the current character without consuming it."""
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        """Return the next character without consuming it."""
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def match(self, expected: str) -> bool:
        """Consume the current character if it matches expected."""
        if self.is_at_end():
            return False
        if self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def is_at_end(self) -> bool:
        """Check if we've reached the end of the source."""
        return self.current >= len(self.source)

    def add_token(self, type: TokenType, value=None) -> None:
        """Add a token spanning from the token start to the current position."""
        lexeme = self.source[self.start:self.current]
        self.tokens.append(Token(type, lexeme, value, self.start, self.current))

    def string(self, quote: str) -> None:
        """Scan a string literal."""
        value = []

        while self.peek() != quote and not self.is_at_end():
            if self.peek() == '\\':
                self.advance()
                if self.is_at_end():
                    break
                c = self.advance()
                value.append(ESCAPES.get(c, c))
            else:
                value.append(self.advance())

        if self.is_at_end():
            raise TokenizeError("Unterminated string", self.start)

        # Consume closing quote
        self.advance()

        self.add_token(TokenType.STRING, ''.join(value))

    def number(self) -> None:
        """Scan a number literal."""
        if self.source[self.start] == '0' and self.peek() in 'xX':
            if self.peek_next() not in HEX_DIGITS:
                raise TokenizeError("Malformed hexadecimal literal", self.start)
            self.advance()
            while self.peek() in HEX_DIGITS:
                self.advance()
            value = float(int(self.source[self.start + 2:self.current], 16))
            self.add_token(TokenType.NUMBER, value)
            return

        while self.peek() in DIGITS:
            self.advance()

        # Fractional part
        if self.peek() == '.' and self.peek_next() in DIGITS:
            self.advance()  # Consume '.'
            while self.peek() in DIGITS:
                self.advance()

        # Exponent part
        if self.peek() in 'eE':
            mark = self.current
            self.advance()
            if self.peek() in '+-':
                self.advance()
            if self.peek() not in DIGITS:
                # Not an exponent after all, leave it for the identifier scanner
                self.current = mark
            while self.peek() in DIGITS:
                self.advance()

        value = float(self.source[self.start:self.current])
        self.add_token(TokenType.NUMBER, value)

    def identifier(self) -> None:
        """Scan an identifier or keyword."""
        while self.peek().isalnum() or self.peek() == '_':
            self.advance()

        text = self.source[self.start:self.current]
        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)

        if token_type == TokenType.TRUE:
            self.add_token(token_type, True)
        elif token_type == TokenType.FALSE:
            self.add_token(token_type, False)
        else:
            self.add_token(token_type)


def tokenize(source: str) -> TokenStream:
    """Tokenize a whole buffer eagerly."""
    return Lexer(source).tokenize()
