"""
Precedence merge of configuration trees.

``merge(primary, secondary)`` combines two trees where ``primary`` wins on
colliding scalars. Mappings are merged key by key, lists are concatenated
(primary items first, duplicates kept) and values of incompatible kinds
raise ``TypeMismatchError``. Inputs are never modified and the result never
shares containers with them.
"""

import logging
from typing import Any, Optional

from ..model.errors import TypeMismatchError
from ..model.values import ConfigValue, Empty, ListNode, Mapping, Scalar, from_python


logger = logging.getLogger(__name__)


def _normalize(value: Any) -> Optional[ConfigValue]:
    if value is None or isinstance(value, Empty):
        return None
    node = from_python(value)
    if isinstance(node, Scalar) and node.is_null:
        return None
    return node


def _is_empty_mapping(node: Optional[ConfigValue]) -> bool:
    return isinstance(node, Mapping) and len(node) == 0


def _is_empty_list(node: ConfigValue) -> bool:
    return isinstance(node, ListNode) and len(node) == 0


def _same_kind(first: ConfigValue, second: ConfigValue) -> bool:
    if isinstance(first, Scalar) and isinstance(second, Scalar):
        return first.scalar_kind is second.scalar_kind
    return type(first) is type(second)


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def merge(primary: Any, secondary: Any) -> ConfigValue:
    """
    Merge two configuration trees, ``primary`` taking precedence.

    Args:
        primary: Tree whose values win on collisions (node or plain Python)
        secondary: Lower precedence tree (node or plain Python)

    Returns:
        A new tree. ``merge(None, None)`` is an empty Mapping.

    Raises:
        TypeMismatchError: If colliding values have incompatible kinds
    """
    return _merge(_normalize(primary), _normalize(secondary), "")


def _merge(primary: Optional[ConfigValue], secondary: Optional[ConfigValue], path: str) -> ConfigValue:
    if primary is None and secondary is None:
        return Mapping()
    if secondary is None:
        return primary.copy()
    if primary is None:
        return secondary.copy()

    if isinstance(primary, Mapping) and isinstance(secondary, Mapping):
        primary_empty = len(primary) == 0
        secondary_empty = len(secondary) == 0

        if primary_empty and secondary_empty:
            # an explicit (non-default) empty wins over an implicit default one
            return Mapping(is_default=primary.is_default and secondary.is_default)

        if primary_empty != secondary_empty and primary.is_default == secondary.is_default:
            return (secondary if primary_empty else primary).copy()

        return _merge_mappings(primary, secondary, path)

    return _resolve(primary, secondary, path)


def _merge_mappings(primary: Mapping, secondary: Mapping, path: str) -> Mapping:
    result = Mapping(is_default=primary.is_default and secondary.is_default)

    for key, value in primary.items():
        if key not in secondary:
            result.set(key, value.copy(), primary.is_entry_default(key))
    for key, value in secondary.items():
        if key not in primary:
            result.set(key, value.copy(), secondary.is_entry_default(key))

    for key, value in primary.items():
        if key not in secondary:
            continue
        merged = _resolve(_normalize(value), _normalize(secondary[key]), _join(path, key))
        result.set(key, merged, primary.is_entry_default(key))

    return result


def _resolve(first: Optional[ConfigValue], second: Optional[ConfigValue], path: str) -> ConfigValue:
    """Resolve a single collision; ``first`` has precedence."""
    if first is None and second is None:
        return Scalar(None)
    if second is None:
        return first.copy()
    if first is None:
        return second.copy()

    if _is_empty_list(first):
        return second.copy()
    if _is_empty_list(second):
        return first.copy()

    if not _same_kind(first, second):
        raise TypeMismatchError(
            f"Cannot merge {first.kind} with {second.kind}",
            path=path,
            kinds=(first.kind, second.kind),
        )

    if isinstance(first, Mapping):
        return _merge(first, second, path)

    if isinstance(first, ListNode):
        # concatenation, not set union
        items = [item.copy() for item in first] + [item.copy() for item in second]
        return ListNode(items, first.is_default)

    return first.copy()


def merge_all(*trees: Any) -> ConfigValue:
    """
    Merge several trees, earlier ones taking precedence.

    ``merge_all(scope, user, default)`` is
    ``merge(scope, merge(user, default))``.
    """
    if not trees:
        return Mapping()
    if len(trees) == 1:
        return from_python(trees[0]).copy() if trees[0] is not None else Mapping()

    result = trees[-1]
    for tree in reversed(trees[:-1]):
        result = merge(tree, result)
    logger.debug(f"Merged {len(trees)} configuration trees")
    return result
