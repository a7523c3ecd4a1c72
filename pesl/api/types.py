"""
PESL Object Model

A closed set of tagged values shared by the evaluator and host functions.
Numbers are stored as numpy float64 so arithmetic follows IEEE double
semantics.
"""

from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, TYPE_CHECKING
from dataclasses import dataclass
import math
import numpy as np

from ..errors import EvalError

if TYPE_CHECKING:
    from .context import Context


class ObjectType(Enum):
    """Tags of the PESL object variants."""

    UNDEFINED = auto()
    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()
    FUNCTION = auto()
    ARRAY = auto()
    MAP = auto()


TYPE_NAMES = {
    ObjectType.UNDEFINED: 'undefined',
    ObjectType.NUMBER: 'number',
    ObjectType.STRING: 'string',
    ObjectType.BOOLEAN: 'boolean',
    ObjectType.FUNCTION: 'function',
    ObjectType.ARRAY: 'array',
    ObjectType.MAP: 'map',
}


@dataclass(eq=False)
class PESLObject:
    """
    Python representation of a PESL value.

    ``type`` selects the variant and ``data`` holds its payload:
    None, np.float64, str, bool, PESLFunction, list of PESLObject or
    dict of str to PESLObject.
    """

    type: ObjectType
    data: Any

    @classmethod
    def number(cls, value: float) -> 'PESLObject':
        """Create a number value (64-bit float)."""
        return cls(ObjectType.NUMBER, np.float64(value))

    @classmethod
    def string(cls, value: str) -> 'PESLObject':
        """Create a string value."""
        return cls(ObjectType.STRING, value)

    @classmethod
    def boolean(cls, value: bool) -> 'PESLObject':
        """Create a boolean value."""
        return TRUE if value else FALSE

    @classmethod
    def function(cls, func: 'PESLFunction') -> 'PESLObject':
        """Wrap a function."""
        return cls(ObjectType.FUNCTION, func)

    @classmethod
    def array(cls, items: List['PESLObject']) -> 'PESLObject':
        """Create an array value."""
        return cls(ObjectType.ARRAY, list(items))

    @classmethod
    def map(cls, entries: Dict[str, 'PESLObject']) -> 'PESLObject':
        """Create a map value."""
        return cls(ObjectType.MAP, dict(entries))

    @property
    def type_name(self) -> str:
        return TYPE_NAMES[self.type]

    def stringify(self, _active: Optional[Set[int]] = None) -> str:
        """
        Return the text representation shown by println and the REPL.

        A container that contains itself is rendered as ``[...]`` or
        ``{...}`` where it recurs.
        """
        if self.type == ObjectType.UNDEFINED:
            return 'undefined'
        elif self.type == ObjectType.NUMBER:
            return format_number(self.data)
        elif self.type == ObjectType.STRING:
            return self.data
        elif self.type == ObjectType.BOOLEAN:
            return 'true' if self.data else 'false'
        elif self.type == ObjectType.FUNCTION:
            return f"<function {self.data.name}>"

        active = set() if _active is None else _active
        if id(self) in active:
            return '[...]' if self.type == ObjectType.ARRAY else '{...}'
        active.add(id(self))
        try:
            if self.type == ObjectType.ARRAY:
                return '[' + ', '.join(item.stringify(active) for item in self.data) + ']'
            return '{' + ', '.join(f"{key}: {value.stringify(active)}"
                                   for key, value in self.data.items()) + '}'
        finally:
            active.discard(id(self))

    def as_number(self) -> np.float64:
        """Coerce to a number, failing for every other variant."""
        if self.type != ObjectType.NUMBER:
            raise EvalError(f"Expected number, got {self.type_name}")
        return self.data

    def as_boolean(self) -> bool:
        """Coerce to a boolean, failing for every other variant."""
        if self.type != ObjectType.BOOLEAN:
            raise EvalError(f"Expected boolean, got {self.type_name}")
        return self.data

    def as_string(self) -> str:
        if self.type != ObjectType.STRING:
            raise EvalError(f"Expected string, got {self.type_name}")
        return self.data

    def call(self, arguments: List['PESLObject'],
             receiver: Optional['PESLObject'] = None) -> 'PESLObject':
        """Invoke this object, failing if it is not a function."""
        if self.type != ObjectType.FUNCTION:
            raise EvalError(f"Cannot call {self.type_name}")
        return self.data.call(arguments, receiver)

    def equals(self, other: 'PESLObject',
               _active: Optional[Set[Tuple[int, int]]] = None) -> bool:
        """
        Structural equality of two values.

        A pair of containers met again while it is still being compared
        counts as equal.
        """
        if self.type != other.type:
            return False
        if self.type == ObjectType.UNDEFINED:
            return True
        if self.type == ObjectType.FUNCTION:
            return self.data is other.data
        if self.type not in (ObjectType.ARRAY, ObjectType.MAP):
            return bool(self.data == other.data)

        active = set() if _active is None else _active
        pair = (id(self), id(other))
        if pair in active:
            return True
        active.add(pair)
        try:
            if self.type == ObjectType.ARRAY:
                return (len(self.data) == len(other.data)
                        and all(a.equals(b, active) for a, b in zip(self.data, other.data)))
            return (self.data.keys() == other.data.keys()
                    and all(value.equals(other.data[key], active)
                            for key, value in self.data.items()))
        finally:
            active.discard(pair)

    def __repr__(self) -> str:
        return f"PESLObject({self.type_name}, {self.stringify()!r})"


class PESLFunction:
    """
    A callable PESL value.

    Either a native (host) function, which wraps a Python callable taking
    ``(arguments, receiver)``, or a user function defined by a function
    literal, which keeps its parameters, body and defining scope.
    """

    def __init__(self,
                 name: str,
                 is_method: bool = False,
                 host_func: Optional[Callable[[List[PESLObject], Optional[PESLObject]], PESLObject]] = None,
                 params: Optional[List[str]] = None,
                 body: Any = None,
                 closure: Optional['Context'] = None):
        self.name = name
        self.is_method = is_method
        self.host_func = host_func
        self.params = params or []
        self.body = body
        self.closure = closure

    @property
    def is_host(self) -> bool:
        return self.host_func is not None

    @classmethod
    def native(cls, name: str, host_func: Callable, is_method: bool = False) -> 'PESLFunction':
        """Create a host function."""
        return cls(name, is_method=is_method, host_func=host_func)

    def call(self, arguments: List[PESLObject],
             receiver: Optional[PESLObject] = None) -> PESLObject:
        """Call the function with already-evaluated arguments."""
        if self.is_method and receiver is None:
            raise EvalError(f"{self.name} must be called on a receiver")
        if self.is_host:
            return self.host_func(arguments, receiver)

        from ..compiler.ast import ReturnSignal
        from ..errors import validate_argument_count

        validate_argument_count(arguments, 0, len(self.params))
        scope = self.closure.push()
        for i, param in enumerate(self.params):
            scope.let_key(param, arguments[i] if i < len(arguments) else UNDEFINED)
        if receiver is not None:
            scope.let_key('this', receiver)

        try:
            return self.body.evaluate(scope)
        except ReturnSignal as signal:
            return signal.value
        except RecursionError:
            raise EvalError("Maximum recursion depth exceeded")

    def __repr__(self) -> str:
        if self.is_host:
            return f"PESLFunction(host:{self.name}, method={self.is_method})"
        return f"PESLFunction({self.name}, params={self.params})"


def format_number(value: np.float64) -> str:
    """Format a number the way PESL prints it."""
    value = float(value)
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


UNDEFINED = PESLObject(ObjectType.UNDEFINED, None)
TRUE = PESLObject(ObjectType.BOOLEAN, True)
FALSE = PESLObject(ObjectType.BOOLEAN, False)
