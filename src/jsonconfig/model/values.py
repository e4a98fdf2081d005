"""
Configuration tree nodes.

A configuration tree is built from four node types:

    Scalar   -- a string, integer, float, boolean or JSON null
    ListNode -- an ordered sequence of nodes
    Mapping  -- string keys mapped to nodes, with per-entry provenance
    Empty    -- the sentinel returned for anything that does not exist

Every node carries an ``is_default`` flag telling whether it was built from
the default layer. On a Mapping the flag of each *entry* is the authoritative
provenance, because a merged mapping mixes default and user entries.

Attribute access and ``get()`` never raise on a missing key, they return
``EMPTY``, which in turn answers every further access with itself:

    >>> cfg = from_python({"ui": {"theme": "dark"}})
    >>> cfg.ui.theme.as_string()
    'dark'
    >>> cfg.does.not_.exist.as_int()
    0
"""

import json
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from .errors import KeyNotFoundError, TypeMismatchError


class ScalarKind(Enum):
    """Kinds of scalar values."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"


def _scalar_kind(value: Any) -> ScalarKind:
    # bool must be checked before int
    if value is None:
        return ScalarKind.NULL
    if isinstance(value, bool):
        return ScalarKind.BOOLEAN
    if isinstance(value, int):
        return ScalarKind.INTEGER
    if isinstance(value, float):
        return ScalarKind.FLOAT
    if isinstance(value, str):
        return ScalarKind.STRING
    raise TypeError(f"Unsupported scalar type: {type(value).__name__}")


class ConfigValue:
    """Base class of all configuration nodes."""

    __slots__ = ()

    is_default: bool = False

    @property
    def kind(self) -> str:
        """Structural kind name used in type checks and error messages."""
        raise NotImplementedError

    def to_python(self) -> Any:
        raise NotImplementedError

    def copy(self) -> "ConfigValue":
        raise NotImplementedError

    def _mismatch(self, wanted: str) -> TypeMismatchError:
        return TypeMismatchError(
            f"Cannot read {self.kind} value as {wanted}",
            kinds=(self.kind, wanted),
        )

    def as_string(self) -> str:
        raise self._mismatch("string")

    def as_bool(self) -> bool:
        raise self._mismatch("boolean")

    def as_int(self) -> int:
        raise self._mismatch("integer")

    def as_float(self) -> float:
        raise self._mismatch("float")

    def as_list(self) -> list:
        raise self._mismatch("list")

    def as_dict(self) -> dict:
        raise self._mismatch("mapping")

    def __getattr__(self, name: str) -> "ConfigValue":
        # Only reached when normal lookup fails: a field that does not exist.
        if name.startswith("_"):
            raise AttributeError(name)
        return EMPTY

    def get(self, key: str, default: Any = None) -> Any:
        return EMPTY if default is None else default

    def lookup(self, path: str) -> "ConfigValue":
        return EMPTY


class Empty(ConfigValue):
    """
    Safe-navigation sentinel.

    Returned for any field that does not exist. Converts to the zero value of
    whatever type it is read as and answers any further field access with
    itself, so arbitrarily long chains never raise.
    """

    __slots__ = ()
    _instance: Optional["Empty"] = None

    def __new__(cls) -> "Empty":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def kind(self) -> str:
        return "empty"

    def to_python(self) -> None:
        return None

    def copy(self) -> "Empty":
        return self

    def as_string(self) -> str:
        return ""

    def as_bool(self) -> bool:
        return False

    def as_int(self) -> int:
        return 0

    def as_float(self) -> float:
        return 0.0

    def as_list(self) -> list:
        return []

    def as_dict(self) -> dict:
        return {}

    def __getitem__(self, key: Any) -> "Empty":
        return self

    def __bool__(self) -> bool:
        return False

    def __len__(self) -> int:
        return 0

    def __iter__(self) -> Iterator[Any]:
        return iter(())

    def __contains__(self, item: Any) -> bool:
        return False

    def __int__(self) -> int:
        return 0

    def __float__(self) -> float:
        return 0.0

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "EMPTY"

    def __eq__(self, other: Any) -> bool:
        return other is None or isinstance(other, Empty)

    def __hash__(self) -> int:
        return hash(None)

    def __reduce__(self):
        return (Empty, ())


EMPTY = Empty()


class Scalar(ConfigValue):
    """A string, integer, float, boolean or null leaf."""

    __slots__ = ("value", "scalar_kind", "is_default")

    def __init__(self, value: Union[str, int, float, bool, None], is_default: bool = False):
        self.value = value
        self.scalar_kind = _scalar_kind(value)
        self.is_default = is_default

    @property
    def kind(self) -> str:
        return self.scalar_kind.value

    @property
    def is_null(self) -> bool:
        return self.scalar_kind is ScalarKind.NULL

    def to_python(self) -> Any:
        return self.value

    def copy(self) -> "Scalar":
        return Scalar(self.value, self.is_default)

    def as_string(self) -> str:
        if self.is_null:
            return ""
        if self.scalar_kind is not ScalarKind.STRING:
            raise self._mismatch("string")
        return self.value

    def as_bool(self) -> bool:
        if self.is_null:
            return False
        if self.scalar_kind is not ScalarKind.BOOLEAN:
            raise self._mismatch("boolean")
        return self.value

    def as_int(self) -> int:
        if self.is_null:
            return 0
        if self.scalar_kind is not ScalarKind.INTEGER:
            raise self._mismatch("integer")
        return self.value

    def as_float(self) -> float:
        if self.is_null:
            return 0.0
        if self.scalar_kind not in (ScalarKind.FLOAT, ScalarKind.INTEGER):
            raise self._mismatch("float")
        return float(self.value)

    def as_list(self) -> list:
        if self.is_null:
            return []
        raise self._mismatch("list")

    def as_dict(self) -> dict:
        if self.is_null:
            return {}
        raise self._mismatch("mapping")

    def __bool__(self) -> bool:
        return bool(self.value)

    def __int__(self) -> int:
        return int(self.value) if self.value is not None else 0

    def __float__(self) -> float:
        return float(self.value) if self.value is not None else 0.0

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)

    def __repr__(self) -> str:
        return f"Scalar({self.value!r}{', default' if self.is_default else ''})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Scalar):
            return self.scalar_kind is other.scalar_kind and self.value == other.value
        if isinstance(other, ConfigValue):
            return False
        return self.value == other

    def __hash__(self) -> int:
        return hash(self.value)


class ListNode(ConfigValue):
    """An ordered list of nodes."""

    __slots__ = ("items", "is_default")

    def __init__(self, items: Optional[List[Any]] = None, is_default: bool = False):
        self.items: List[ConfigValue] = [from_python(item, is_default) for item in (items or [])]
        self.is_default = is_default

    @property
    def kind(self) -> str:
        return "list"

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]

    def copy(self) -> "ListNode":
        return ListNode([item.copy() for item in self.items], self.is_default)

    def as_list(self) -> list:
        return self.to_python()

    def append(self, value: Any) -> None:
        self.items.append(from_python(value, self.is_default))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[ConfigValue]:
        return iter(self.items)

    def __getitem__(self, index: Union[int, slice]) -> ConfigValue:
        if isinstance(index, slice):
            return ListNode(self.items[index], self.is_default)
        return self.items[index]

    def __contains__(self, item: Any) -> bool:
        return any(node == item for node in self.items)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ListNode):
            return self.items == other.items
        if isinstance(other, (list, tuple)):
            return self.to_python() == list(other)
        return False

    __hash__ = None

    def __repr__(self) -> str:
        return f"ListNode({self.items!r})"


class Mapping(ConfigValue):
    """
    String keys mapped to nodes.

    Provenance is tracked per entry: ``is_entry_default(key)`` tells whether
    the value stored under ``key`` came from the default layer. Assigning a
    key replaces both the value and the provenance of that key only; unless
    told otherwise the entry inherits the mapping's own ``is_default``.
    """

    __slots__ = ("_entries", "_from_default", "is_default")

    def __init__(self, entries: Optional[Dict[str, Any]] = None, is_default: bool = False):
        object.__setattr__(self, "is_default", is_default)
        object.__setattr__(self, "_entries", {})
        object.__setattr__(self, "_from_default", {})
        for key, value in (entries or {}).items():
            self.set(key, value)

    @property
    def kind(self) -> str:
        return "mapping"

    # -- mutation ---------------------------------------------------------

    def set(self, key: str, value: Any, is_default: Optional[bool] = None) -> None:
        """Assign ``key``; provenance defaults to this mapping's own flag."""
        if not isinstance(key, str):
            raise TypeError(f"Configuration keys must be strings, got {type(key).__name__}")
        entry_default = self.is_default if is_default is None else is_default
        self._entries[key] = from_python(value, entry_default)
        self._from_default[key] = entry_default

    def remove(self, key: str) -> bool:
        self._from_default.pop(key, None)
        return self._entries.pop(key, None) is not None

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        if key not in self._entries:
            raise KeyNotFoundError(key)
        self.remove(key)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or name == "is_default":
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def apply_json(self, text: str) -> None:
        """Merge JSON text over this mapping, replacing its entries in place."""
        # deferred: json_io and merger both depend on this module
        from ..core.merger import merge
        from ..utils.json_io import parse

        result = merge(parse(text), self)
        if not isinstance(result, Mapping):
            raise TypeMismatchError("JSON text must decode to an object", kinds=(result.kind, self.kind))
        object.__setattr__(self, "_entries", result._entries)
        object.__setattr__(self, "_from_default", result._from_default)

    # -- lookup -----------------------------------------------------------

    def __getattr__(self, name: str) -> ConfigValue:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._entries.get(name, EMPTY)

    def __getitem__(self, key: str) -> ConfigValue:
        try:
            return self._entries[key]
        except KeyError:
            raise KeyNotFoundError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._entries:
            return self._entries[key]
        return EMPTY if default is None else default

    def lookup(self, path: str) -> ConfigValue:
        """Safe navigation over a dotted path such as ``'ui.window.width'``."""
        node: ConfigValue = self
        for part in path.split("."):
            node = node.get(part)
            if node is EMPTY:
                break
        return node

    def exists(self, key: str) -> bool:
        return key in self._entries

    def is_entry_default(self, key: str) -> bool:
        return self._from_default.get(key, False)

    def keys(self):
        return self._entries.keys()

    def values(self):
        return self._entries.values()

    def items(self):
        return self._entries.items()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    # -- conversion -------------------------------------------------------

    def to_python(self) -> dict:
        return {key: value.to_python() for key, value in self._entries.items()}

    def as_dict(self) -> dict:
        return self.to_python()

    def copy(self) -> "Mapping":
        clone = Mapping(is_default=self.is_default)
        for key, value in self._entries.items():
            clone._entries[key] = value.copy()
            clone._from_default[key] = self._from_default[key]
        return clone

    def non_default(self) -> dict:
        """
        Plain-Python view of the entries that did not come from the default layer.

        This is what gets persisted: default entries are dropped, nested
        default mappings are dropped, nested user mappings are filtered
        recursively and default items are removed from lists.
        """
        result = {}
        for key, value in self._entries.items():
            if self._from_default.get(key, False):
                continue
            if isinstance(value, Mapping):
                if value.is_default:
                    continue
                result[key] = value.non_default()
            elif isinstance(value, ListNode):
                result[key] = _non_default_items(value)
            else:
                result[key] = value.to_python()
        return result

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Mapping):
            return self._entries == other._entries
        if isinstance(other, dict):
            return self.to_python() == other
        return False

    __hash__ = None

    def __str__(self) -> str:
        return json.dumps(self.to_python(), ensure_ascii=False)

    def __repr__(self) -> str:
        return f"Mapping({self.to_python()!r}{', default' if self.is_default else ''})"

    def __getstate__(self):
        return (self.is_default, self._entries, self._from_default)

    def __setstate__(self, state) -> None:
        is_default, entries, from_default = state
        object.__setattr__(self, "is_default", is_default)
        object.__setattr__(self, "_entries", entries)
        object.__setattr__(self, "_from_default", from_default)


def _non_default_items(node: ListNode) -> list:
    items = []
    for item in node.items:
        if item.is_default:
            continue
        if isinstance(item, Mapping):
            items.append(item.non_default())
        elif isinstance(item, ListNode):
            items.append(_non_default_items(item))
        else:
            items.append(item.to_python())
    return items


def from_python(obj: Any, is_default: bool = False) -> ConfigValue:
    """
    Convert a plain Python value into a configuration node.

    Every node created, and every mapping entry, is tagged with
    ``is_default``. Values that already are nodes are returned unchanged.

    Raises:
        TypeError: If ``obj`` contains a value that has no JSON equivalent
    """
    if isinstance(obj, ConfigValue):
        return obj
    if isinstance(obj, dict):
        return Mapping(obj, is_default)
    if isinstance(obj, (list, tuple)):
        return ListNode(list(obj), is_default)
    return Scalar(obj, is_default)
