"""
PESL Object API

The runtime object model and the namespace statements run against.
"""

from .types import PESLObject, PESLFunction, ObjectType, UNDEFINED
from .context import Context

__all__ = [
    'PESLObject',
    'PESLFunction',
    'ObjectType',
    'UNDEFINED',
    'Context',
]
