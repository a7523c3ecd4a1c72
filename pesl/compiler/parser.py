"""
PESL Parser

Recursive descent parser that reads one top-level statement at a time
from a TokenStream.
"""

from typing import List, Optional, Tuple

from .tokens import Token, TokenType, TokenStream
from .ast import *
from ..errors import ParseError
from ..api.types import PESLObject, UNDEFINED


class Parser:
    """
    Recursive descent parser for PESL.

    Example:
        stream = tokenize("let x = 1; println(x)")
        while stream.has_any():
            Parser().parse_next(stream).evaluate(ctx)
    """

    def __init__(self):
        self.tokens: Optional[TokenStream] = None
        self.function_depth = 0
        self._previous: Optional[Token] = None

    def parse_next(self, tokens: TokenStream) -> Optional[Node]:
        """
        Parse exactly one statement from the front of the stream.

        Empty statements (bare ';') before it are skipped.

        Args:
            tokens: Stream with at least one remaining token

        Returns:
            The parsed statement node, or None if only ';' tokens remained

        Raises:
            ParseError: If the tokens at the front do not form a statement
        """
        self.tokens = tokens
        self.function_depth = 0
        self.skip_empty()
        if not tokens.has_any():
            return None
        return self.statement()

    # =========================================================================
    # Statements
    # =========================================================================

    def statement(self) -> Node:
        """Parse a statement and its optional trailing ';'."""
        if self.match(TokenType.LET):
            node = self.let_statement()
        elif self.match(TokenType.RETURN):
            node = self.return_statement()
        elif self.match(TokenType.IF):
            node = self.if_statement()
        elif self.match(TokenType.WHILE):
            node = self.while_statement()
        else:
            node = self.expression()

        self.skip_empty()
        return node

    def skip_empty(self) -> None:
        """Consume any run of ';' tokens."""
        while self.match(TokenType.SEMICOLON):
            pass

    def let_statement(self) -> LetStmt:
        """Parse a variable declaration."""
        name = self.consume(TokenType.IDENTIFIER, "Expected variable name after 'let'")
        self.consume(TokenType.ASSIGN, "Expected '=' after variable name")
        initializer = self.expression()

        if isinstance(initializer, FunctionExpr) and initializer.name is None:
            initializer.name = name.lexeme

        return LetStmt(name, initializer)

    def return_statement(self) -> ReturnStmt:
        """Parse a return statement."""
        keyword = self.previous()
        if self.function_depth == 0:
            raise ParseError("Cannot return outside of a function", keyword)

        value = None
        if not self.check(TokenType.SEMICOLON) and not self.check(TokenType.RBRACE) \
                and self.tokens.has_any():
            value = self.expression()

        return ReturnStmt(keyword, value)

    def if_statement(self) -> IfStmt:
        """Parse an if statement."""
        self.consume(TokenType.LPAREN, "Expected '(' after 'if'")
        condition = self.expression()
        self.consume(TokenType.RPAREN, "Expected ')' after if condition")

        self.consume(TokenType.LBRACE, "Expected '{' after if condition")
        then_branch = self.block()

        else_branch = None
        if self.match(TokenType.ELSE):
            if self.match(TokenType.IF):
                else_branch = self.if_statement()
            else:
                self.consume(TokenType.LBRACE, "Expected '{' after 'else'")
                else_branch = self.block()

        return IfStmt(condition, then_branch, else_branch)

    def while_statement(self) -> WhileStmt:
        """Parse a while statement."""
        self.consume(TokenType.LPAREN, "Expected '(' after 'while'")
        condition = self.expression()
        self.consume(TokenType.RPAREN, "Expected ')' after while condition")

        self.consume(TokenType.LBRACE, "Expected '{' after while condition")
        body = self.block()

        return WhileStmt(condition, body)

    def block(self) -> BlockStmt:
        """Parse a block of statements; the opening '{' is already consumed."""
        statements = []

        self.skip_empty()
        while not self.check(TokenType.RBRACE):
            if not self.tokens.has_any():
                raise ParseError("Expected '}' after block", self.tokens.last())
            statements.append(self.statement())

        self.advance()  # Consume '}'
        return BlockStmt(statements)

    # =========================================================================
    # Expressions
    # =========================================================================

    def expression(self) -> Expression:
        """Parse an expression."""
        return self.assignment()

    def assignment(self) -> Expression:
        """Parse an assignment expression."""
        expr = self.or_expr()

        if self.match(TokenType.ASSIGN):
            operator = self.previous()
            value = self.assignment()

            if isinstance(expr, (IdentifierExpr, IndexExpr, DotExpr)):
                return AssignExpr(expr, operator, value)

            raise ParseError("Invalid assignment target", operator)

        return expr

    def or_expr(self) -> Expression:
        """Parse a logical OR expression."""
        expr = self.and_expr()

        while self.match(TokenType.OR):
            operator = self.previous()
            right = self.and_expr()
            expr = BinaryExpr(expr, operator, right)

        return expr

    def and_expr(self) -> Expression:
        """Parse a logical AND expression."""
        expr = self.equality()

        while self.match(TokenType.AND):
            operator = self.previous()
            right = self.equality()
            expr = BinaryExpr(expr, operator, right)

        return expr

    def equality(self) -> Expression:
        """Parse an equality expression."""
        expr = self.comparison()

        while self.match(TokenType.EQ, TokenType.NE):
            operator = self.previous()
            right = self.comparison()
            expr = BinaryExpr(expr, operator, right)

        return expr

    def comparison(self) -> Expression:
        """Parse a comparison expression."""
        expr = self.term()

        while self.match(TokenType.LT, TokenType.LE, TokenType.GT, TokenType.GE):
            operator = self.previous()
            right = self.term()
            expr = BinaryExpr(expr, operator, right)

        return expr

    def term(self) -> Expression:
        """Parse addition/subtraction."""
        expr = self.factor()

        while self.match(TokenType.PLUS, TokenType.MINUS):
            operator = self.previous()
            right = self.factor()
            expr = BinaryExpr(expr, operator, right)

        return expr

    def factor(self) -> Expression:
        """Parse multiplication/division/modulo."""
        expr = self.unary()

        while self.match(TokenType.STAR, TokenType.SLASH, TokenType.PERCENT):
            operator = self.previous()
            right = self.unary()
            expr = BinaryExpr(expr, operator, right)

        return expr

    def unary(self) -> Expression:
        """Parse unary expressions."""
        if self.match(TokenType.MINUS, TokenType.BANG):
            operator = self.previous()
            operand = self.unary()
            return UnaryExpr(operator, operand)

        return self.call()

    def call(self) -> Expression:
        """Parse function calls, indexing and member access."""
        expr = self.primary()

        while True:
            if self.match(TokenType.LPAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expected property name after '.'")
                expr = DotExpr(expr, name)
            elif self.match(TokenType.LBRACKET):
                bracket = self.previous()
                index = self.expression()
                self.consume(TokenType.RBRACKET, "Expected ']' after index")
                expr = IndexExpr(expr, index, bracket)
            else:
                break

        return expr

    def finish_call(self, callee: Expression) -> CallExpr:
        """Parse function call arguments."""
        paren = self.previous()
        arguments = self.comma_separated(TokenType.RPAREN, "Expected ')' after arguments")
        return CallExpr(callee, arguments, paren)

    def primary(self) -> Expression:
        """Parse primary expressions."""
        if self.match(TokenType.UNDEFINED):
            return LiteralExpr(UNDEFINED, self.previous())
        if self.match(TokenType.TRUE, TokenType.FALSE):
            return LiteralExpr(PESLObject.boolean(self.previous().value), self.previous())
        if self.match(TokenType.NUMBER):
            return LiteralExpr(PESLObject.number(self.previous().value), self.previous())
        if self.match(TokenType.STRING):
            return LiteralExpr(PESLObject.string(self.previous().value), self.previous())

        if self.match(TokenType.IDENTIFIER):
            return IdentifierExpr(self.previous().lexeme, self.previous())

        if self.match(TokenType.LPAREN):
            expr = self.expression()
            self.consume(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        if self.match(TokenType.LBRACKET):
            bracket = self.previous()
            elements = self.comma_separated(TokenType.RBRACKET, "Expected ']' after array elements")
            return ArrayExpr(elements, bracket)

        if self.match(TokenType.LBRACE):
            return self.map_literal()

        if self.match(TokenType.FUNCTION):
            return self.function_expression()

        raise ParseError("Expected expression", self.current_token())

    def map_literal(self) -> MapExpr:
        """Parse a map literal; the opening '{' is already consumed."""
        brace = self.previous()
        entries: List[Tuple[str, Expression]] = []

        if not self.check(TokenType.RBRACE):
            entries.append(self.map_entry())
            while self.match(TokenType.COMMA):
                if self.check(TokenType.RBRACE):
                    break
                entries.append(self.map_entry())

        self.consume(TokenType.RBRACE, "Expected '}' after map entries")
        return MapExpr(entries, brace)

    def map_entry(self) -> Tuple[str, Expression]:
        """Parse a single `key: value` entry."""
        if self.match(TokenType.IDENTIFIER):
            key = self.previous().lexeme
        else:
            key = self.consume(TokenType.STRING, "Expected map key").value
        self.consume(TokenType.COLON, "Expected ':' after map key")
        return key, self.expression()

    def function_expression(self) -> FunctionExpr:
        """Parse a function literal."""
        keyword = self.previous()
        self.consume(TokenType.LPAREN, "Expected '(' after 'function'")

        params = []
        if not self.check(TokenType.RPAREN):
            params.append(self.consume(TokenType.IDENTIFIER, "Expected parameter name"))
            while self.match(TokenType.COMMA):
                params.append(self.consume(TokenType.IDENTIFIER, "Expected parameter name"))
        self.consume(TokenType.RPAREN, "Expected ')' after parameters")

        self.consume(TokenType.LBRACE, "Expected '{' before function body")
        self.function_depth += 1
        try:
            body = self.block()
        finally:
            self.function_depth -= 1

        return FunctionExpr(params, body, keyword)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def comma_separated(self, closer: TokenType, message: str) -> List[Expression]:
        """Parse `expr, expr, ...` up to and including the closing token."""
        items = []

        if not self.check(closer):
            items.append(self.expression())
            while self.match(TokenType.COMMA):
                items.append(self.expression())

        self.consume(closer, message)
        return items

    def match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types and advance."""
        for type in types:
            if self.check(type):
                self.advance()
                return True
        return False

    def check(self, type: TokenType) -> bool:
        """Check if current token is of given type."""
        token = self.tokens.peek()
        return token is not None and token.type == type

    def advance(self) -> Token:
        """Consume and return the current token."""
        self._previous = self.tokens.advance()
        return self._previous

    def previous(self) -> Token:
        """Return the most recently consumed token."""
        return self._previous

    def current_token(self) -> Token:
        """Return the current token, or the last one at end of input."""
        token = self.tokens.peek()
        if token is None:
            raise ParseError("Unexpected end of input", self.tokens.last())
        return token

    def consume(self, type: TokenType, message: str) -> Token:
        """Consume a token of the expected type or raise an error."""
        if self.check(type):
            return self.advance()
        raise ParseError(message, self.current_token())
