"""
PESL Abstract Syntax Tree

Defines AST node classes for the PESL language. Every node evaluates
itself against a Context and returns a PESLObject.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from .tokens import Token, TokenType
from ..errors import EvalError
from ..api.context import Context
from ..api.types import PESLObject, PESLFunction, ObjectType, UNDEFINED


class ReturnSignal(Exception):
    """Unwinds a function body up to its call."""

    def __init__(self, value: PESLObject):
        self.value = value
        super().__init__("return")


# =============================================================================
# Base Classes
# =============================================================================

class Node(ABC):
    """Base class for all AST nodes."""

    @abstractmethod
    def evaluate(self, context: Context) -> PESLObject:
        """Evaluate this node against a context."""
        pass


class Expression(Node):
    """Base class for expression nodes."""
    pass


class Statement(Node):
    """Base class for statement nodes."""
    pass


# =============================================================================
# Expressions
# =============================================================================

@dataclass
class LiteralExpr(Expression):
    """Literal value expression (number, string, boolean, undefined)."""
    value: PESLObject
    token: Token

    def evaluate(self, context: Context) -> PESLObject:
        return self.value


@dataclass
class IdentifierExpr(Expression):
    """Variable or function name reference."""
    name: str
    token: Token

    def evaluate(self, context: Context) -> PESLObject:
        return context.get_key(self.name)


@dataclass
class UnaryExpr(Expression):
    """Unary operator expression (-, !)."""
    operator: Token
    operand: Expression

    def evaluate(self, context: Context) -> PESLObject:
        value = self.operand.evaluate(context)
        if self.operator.type == TokenType.MINUS:
            return PESLObject.number(-value.as_number())
        return PESLObject.boolean(not value.as_boolean())


@dataclass
class BinaryExpr(Expression):
    """Binary operator expression."""
    left: Expression
    operator: Token
    right: Expression

    def evaluate(self, context: Context) -> PESLObject:
        op = self.operator.type

        # Logical operators short-circuit
        if op == TokenType.AND:
            if not self.left.evaluate(context).as_boolean():
                return PESLObject.boolean(False)
            return PESLObject.boolean(self.right.evaluate(context).as_boolean())
        if op == TokenType.OR:
            if self.left.evaluate(context).as_boolean():
                return PESLObject.boolean(True)
            return PESLObject.boolean(self.right.evaluate(context).as_boolean())

        left = self.left.evaluate(context)
        right = self.right.evaluate(context)

        if op == TokenType.EQ:
            return PESLObject.boolean(left.equals(right))
        if op == TokenType.NE:
            return PESLObject.boolean(not left.equals(right))
        if op == TokenType.PLUS and ObjectType.STRING in (left.type, right.type):
            return PESLObject.string(left.stringify() + right.stringify())

        return arithmetic(op, left.as_number(), right.as_number())


def arithmetic(op: TokenType, a: np.float64, b: np.float64) -> PESLObject:
    """Apply a numeric operator with IEEE double semantics."""
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        if op == TokenType.PLUS:
            return PESLObject.number(a + b)
        elif op == TokenType.MINUS:
            return PESLObject.number(a - b)
        elif op == TokenType.STAR:
            return PESLObject.number(a * b)
        elif op == TokenType.SLASH:
            return PESLObject.number(np.divide(a, b))
        elif op == TokenType.PERCENT:
            # Truncated remainder, sign follows the dividend
            return PESLObject.number(np.fmod(a, b))
        elif op == TokenType.LT:
            return PESLObject.boolean(bool(a < b))
        elif op == TokenType.LE:
            return PESLObject.boolean(bool(a <= b))
        elif op == TokenType.GT:
            return PESLObject.boolean(bool(a > b))
        elif op == TokenType.GE:
            return PESLObject.boolean(bool(a >= b))
    raise EvalError(f"Unknown operator {op.name}")


@dataclass
class CallExpr(Expression):
    """Function call expression."""
    callee: Expression
    arguments: List[Expression]
    paren: Token  # For error reporting

    def evaluate(self, context: Context) -> PESLObject:
        receiver = None
        if isinstance(self.callee, DotExpr):
            receiver = self.callee.object.evaluate(context)
            function = self.callee.lookup(receiver)
        else:
            function = self.callee.evaluate(context)

        arguments = [argument.evaluate(context) for argument in self.arguments]
        return function.call(arguments, receiver)


@dataclass
class IndexExpr(Expression):
    """Index/subscript expression (a[b])."""
    object: Expression
    index: Expression
    bracket: Token

    def evaluate(self, context: Context) -> PESLObject:
        container = self.object.evaluate(context)
        key = self.index.evaluate(context)
        if container.type == ObjectType.ARRAY:
            return container.data[array_index(container, key)]
        if container.type == ObjectType.MAP:
            return container.data.get(key.as_string(), UNDEFINED)
        raise EvalError(f"Cannot index {container.type_name}")


@dataclass
class DotExpr(Expression):
    """Property access expression (a.b)."""
    object: Expression
    name: Token

    def evaluate(self, context: Context) -> PESLObject:
        return self.lookup(self.object.evaluate(context))

    def lookup(self, target: PESLObject) -> PESLObject:
        """Read this property from an already-evaluated target."""
        if target.type != ObjectType.MAP:
            raise EvalError(f"Cannot access property {self.name.lexeme} of {target.type_name}")
        return target.data.get(self.name.lexeme, UNDEFINED)


@dataclass
class AssignExpr(Expression):
    """Assignment expression."""
    target: Expression
    operator: Token
    value: Expression

    def evaluate(self, context: Context) -> PESLObject:
        if isinstance(self.target, IdentifierExpr):
            value = self.value.evaluate(context)
            context.set_key(self.target.name, value)
            return value

        if isinstance(self.target, DotExpr):
            container = self.target.object.evaluate(context)
            value = self.value.evaluate(context)
            if container.type != ObjectType.MAP:
                raise EvalError(f"Cannot set property {self.target.name.lexeme} "
                                f"of {container.type_name}")
            container.data[self.target.name.lexeme] = value
            return value

        container = self.target.object.evaluate(context)
        key = self.target.index.evaluate(context)
        value = self.value.evaluate(context)
        if container.type == ObjectType.ARRAY:
            container.data[array_index(container, key)] = value
        elif container.type == ObjectType.MAP:
            container.data[key.as_string()] = value
        else:
            raise EvalError(f"Cannot index {container.type_name}")
        return value


def array_index(array: PESLObject, key: PESLObject) -> int:
    """Validate an array subscript and return it as an int."""
    number = float(key.as_number())
    if not number.is_integer() or not 0 <= number < len(array.data):
        raise EvalError(f"Index {key.stringify()} out of bounds for length {len(array.data)}")
    return int(number)


@dataclass
class ArrayExpr(Expression):
    """Array literal expression."""
    elements: List[Expression]
    bracket: Token

    def evaluate(self, context: Context) -> PESLObject:
        return PESLObject.array([element.evaluate(context) for element in self.elements])


@dataclass
class MapExpr(Expression):
    """Map literal expression."""
    entries: List[Tuple[str, Expression]]
    brace: Token

    def evaluate(self, context: Context) -> PESLObject:
        return PESLObject.map({key: value.evaluate(context) for key, value in self.entries})


@dataclass
class FunctionExpr(Expression):
    """Function literal; closes over the scope it is evaluated in."""
    params: List[Token]
    body: 'BlockStmt'
    keyword: Token
    name: Optional[str] = None

    def evaluate(self, context: Context) -> PESLObject:
        function = PESLFunction(
            self.name or 'anonymous',
            params=[param.lexeme for param in self.params],
            body=self.body,
            closure=context,
        )
        return PESLObject.function(function)


# =============================================================================
# Statements
# =============================================================================

@dataclass
class LetStmt(Statement):
    """Variable declaration statement."""
    name: Token
    initializer: Expression

    def evaluate(self, context: Context) -> PESLObject:
        value = self.initializer.evaluate(context)
        context.let_key(self.name.lexeme, value)
        return value


@dataclass
class BlockStmt(Statement):
    """Block of statements run in a child scope."""
    statements: List[Node]

    def evaluate(self, context: Context) -> PESLObject:
        scope = context.push()
        result = UNDEFINED
        for statement in self.statements:
            result = statement.evaluate(scope)
        return result


@dataclass
class IfStmt(Statement):
    """If/else statement."""
    condition: Expression
    then_branch: BlockStmt
    else_branch: Optional[Node]

    def evaluate(self, context: Context) -> PESLObject:
        if self.condition.evaluate(context).as_boolean():
            return self.then_branch.evaluate(context)
        if self.else_branch is not None:
            return self.else_branch.evaluate(context)
        return UNDEFINED


@dataclass
class WhileStmt(Statement):
    """While loop statement."""
    condition: Expression
    body: BlockStmt

    def evaluate(self, context: Context) -> PESLObject:
        while self.condition.evaluate(context).as_boolean():
            self.body.evaluate(context)
        return UNDEFINED


@dataclass
class ReturnStmt(Statement):
    """Return statement."""
    keyword: Token
    value: Optional[Expression]

    def evaluate(self, context: Context) -> PESLObject:
        value = self.value.evaluate(context) if self.value is not None else UNDEFINED
        raise ReturnSignal(value)
