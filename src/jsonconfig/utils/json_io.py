"""
JSON text reading and writing for configuration trees.
"""

import json
import logging
import re
from pathlib import Path
from typing import Optional, Union

from ..config.defaults import DEFAULT_SETTINGS
from ..model.errors import ParseError
from ..model.values import ConfigValue, Mapping, from_python


logger = logging.getLogger(__name__)

_COMMENT_LINE = re.compile(r"^\s*#")


def strip_comments(text: str) -> str:
    """Remove every line whose first non-whitespace character is ``#``."""
    return "\n".join(line for line in text.split("\n") if not _COMMENT_LINE.match(line))


def parse(text: str, is_default: bool = False, source: Optional[str] = None) -> ConfigValue:
    """
    Parse JSON configuration text into a tree.

    Args:
        text: JSON text, optionally with ``#`` comment lines
        is_default: Tag every node of the tree as coming from the default layer
        source: Name used in error messages (usually a file path)

    Returns:
        The parsed tree

    Raises:
        ParseError: If the text is not valid JSON
    """
    try:
        data = json.loads(strip_comments(text))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e.msg}", source=source, line=e.lineno, column=e.colno) from e
    return from_python(data, is_default)


def parse_file(
    path: Union[str, Path],
    is_default: bool = False,
    encoding: Optional[str] = None,
) -> ConfigValue:
    """Read and parse a configuration file; read failures are reported as ParseError."""
    encoding = encoding or DEFAULT_SETTINGS["files"]["encoding"]
    try:
        with open(path, "r", encoding=encoding) as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Cannot read config file: {e}", source=str(path)) from e
    return parse(text, is_default=is_default, source=str(path))


def parse_mapping_file(path: Union[str, Path], is_default: bool = False) -> Mapping:
    """Like :func:`parse_file` but require the document to be a JSON object."""
    tree = parse_file(path, is_default=is_default)
    if not isinstance(tree, Mapping):
        raise ParseError(f"Configuration file must contain a JSON object, got {tree.kind}", source=str(path))
    return tree


def serialize(node: ConfigValue, pretty: bool = True) -> str:
    """Encode a whole tree as JSON text."""
    indent = DEFAULT_SETTINGS["files"]["indent"] if pretty else None
    return json.dumps(node.to_python(), indent=indent, ensure_ascii=False)


def serialize_for_save(tree: Mapping) -> str:
    """Encode only the non-default entries of ``tree``, pretty printed."""
    return json.dumps(tree.non_default(), indent=DEFAULT_SETTINGS["files"]["indent"], ensure_ascii=False)
