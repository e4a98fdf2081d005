"""
jsonconfig - layered JSON configuration with provenance tracking and live reload.

A compiled-in default layer is merged with a deployable user file; edits to
the user file are picked up without a restart and only explicit overrides are
ever written back.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .core.merger import merge, merge_all
from .core.registry import ConfigRegistry, get_store, global_store, reset_registry
from .core.store import GLOBAL_SCOPE, ConfigStore, StoreState
from .model.errors import (
    ConfigError,
    DirectoryNotFoundError,
    KeyNotFoundError,
    ParseError,
    TypeMismatchError,
)
from .model.values import EMPTY, ConfigValue, Empty, ListNode, Mapping, Scalar, ScalarKind, from_python
from .utils.json_io import parse, parse_file, serialize, serialize_for_save

__all__ = [
    "__version__",
    "__license__",
    "merge",
    "merge_all",
    "ConfigRegistry",
    "get_store",
    "global_store",
    "reset_registry",
    "GLOBAL_SCOPE",
    "ConfigStore",
    "StoreState",
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
    "parse",
    "parse_file",
    "serialize",
    "serialize_for_save",
]
