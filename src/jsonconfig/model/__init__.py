"""
Configuration tree data model and error types.
"""

from .errors import ConfigError, DirectoryNotFoundError, KeyNotFoundError, ParseError, TypeMismatchError
from .values import EMPTY, ConfigValue, Empty, ListNode, Mapping, Scalar, ScalarKind, from_python

__all__ = [
    "ConfigError",
    "DirectoryNotFoundError",
    "KeyNotFoundError",
    "ParseError",
    "TypeMismatchError",
    "EMPTY",
    "ConfigValue",
    "Empty",
    "ListNode",
    "Mapping",
    "Scalar",
    "ScalarKind",
    "from_python",
]
