"""
Settings of the jsonconfig library itself.
"""

from .defaults import DEFAULT_SETTINGS

__all__ = [
    "DEFAULT_SETTINGS",
]
