"""
PESL Context

The namespace statements are evaluated against. One top-level Context
lives for a whole batch run or REPL session; function calls and blocks
evaluate in child contexts chained to their defining scope.
"""

from typing import Dict, Iterator, Optional

from ..errors import EvalError
from .types import PESLObject


class Context:
    """
    A mutable mapping from names to PESL objects.

    Example:
        ctx = Context()
        ctx.let_key("x", PESLObject.number(1))
        ctx.get_key("x").stringify()  # '1'
    """

    def __init__(self, parent: Optional['Context'] = None):
        """
        Initialize a context.

        Args:
            parent: Enclosing scope consulted for names not defined here
        """
        self.parent = parent
        self._values: Dict[str, PESLObject] = {}

    def push(self) -> 'Context':
        """Create a child scope of this context."""
        return Context(self)

    def has_key(self, name: str) -> bool:
        """Check whether a name is visible from this scope."""
        return self._resolve(name) is not None

    def get_key(self, name: str) -> PESLObject:
        """
        Look up a name through the scope chain.

        Raises:
            EvalError: If the name is not defined
        """
        scope = self._resolve(name)
        if scope is None:
            raise EvalError(f"{name} is not defined")
        return scope._values[name]

    def let_key(self, name: str, value: PESLObject) -> None:
        """Define or redefine a name in this scope."""
        self._values[name] = value

    def set_key(self, name: str, value: PESLObject) -> None:
        """
        Assign to the nearest scope defining the name.

        Raises:
            EvalError: If no enclosing scope defines the name
        """
        scope = self._resolve(name)
        if scope is None:
            raise EvalError(f"{name} is not defined")
        scope._values[name] = value

    def keys(self) -> Iterator[str]:
        """Names defined directly in this scope, in definition order."""
        return iter(self._values)

    def _resolve(self, name: str) -> Optional['Context']:
        scope = self
        while scope is not None:
            if name in scope._values:
                return scope
            scope = scope.parent
        return None

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        depth = 0
        scope = self.parent
        while scope is not None:
            depth += 1
            scope = scope.parent
        return f"Context(names={list(self._values)!r}, depth={depth})"
