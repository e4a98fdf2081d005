"""
Exception types for jsonconfig.
"""

from typing import Optional


class ConfigError(Exception):
    """Base class for all configuration errors."""
    pass


class TypeMismatchError(ConfigError, TypeError):
    """Raised when two values of incompatible kinds collide or a node is read as the wrong kind."""

    def __init__(self, message: str, path: str = "", kinds: tuple = ()):
        self.path = path
        self.kinds = kinds
        if path:
            message = f"{message} (at '{path}')"
        super().__init__(message)


class ParseError(ConfigError, ValueError):
    """Raised when configuration text cannot be read or decoded."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.source = source
        self.line = line
        self.column = column
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class KeyNotFoundError(ConfigError, KeyError):
    """Raised by direct indexed lookups on a missing key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Key not found in configuration: {self.key!r}"


class DirectoryNotFoundError(ConfigError, FileNotFoundError):
    """Raised when a configuration directory does not exist."""
    pass
