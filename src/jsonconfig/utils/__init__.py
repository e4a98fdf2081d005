"""
Utility modules for jsonconfig.
"""

from .json_io import parse, parse_file, serialize, serialize_for_save, strip_comments
from .file_utils import FileUtils, apply_from_directory, apply_json, apply_json_file
from .locking import ReadWriteLock

__all__ = [
    "parse",
    "parse_file",
    "serialize",
    "serialize_for_save",
    "strip_comments",
    "FileUtils",
    "apply_from_directory",
    "apply_json",
    "apply_json_file",
    "ReadWriteLock",
]
