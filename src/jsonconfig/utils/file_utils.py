"""
File system helpers for locating and applying configuration files.
"""

import hashlib
import importlib.resources
import logging
from pathlib import Path
from typing import Iterator, Optional, Union

from ..config.defaults import DEFAULT_SETTINGS
from ..core.merger import merge
from ..model.errors import DirectoryNotFoundError, ParseError
from ..model.values import ConfigValue, Mapping
from .json_io import parse, parse_file

logger = logging.getLogger(__name__)


class FileUtils:
    """Utility functions for configuration file discovery."""

    @staticmethod
    def find_user_config(directory: Union[str, Path], name: str) -> Optional[Path]:
        """
        Find the backing file for a scope.

        Args:
            directory: Directory to search
            name: Scope file name without extension (e.g. 'settings')

        Returns:
            Path of the first candidate that exists, or None
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.debug(f"Config search directory does not exist: {directory}")
            return None

        for ending in DEFAULT_SETTINGS["files"]["user_config_endings"]:
            candidate = directory / f"{name}{ending}"
            if candidate.is_file():
                logger.debug(f"Found user config file: {candidate}")
                return candidate
        return None

    @staticmethod
    def _walk_resources(root) -> Iterator:
        for entry in sorted(root.iterdir(), key=lambda e: e.name):
            if entry.is_dir():
                if entry.name.startswith(("_", ".")):
                    continue
                yield from FileUtils._walk_resources(entry)
            elif entry.is_file():
                yield entry

    @staticmethod
    def find_default_resource(package: Optional[str]):
        """
        Find the bundled default configuration of a package.

        Returns:
            An importlib.resources Traversable, or None if the package ships none
        """
        if not package:
            return None
        try:
            root = importlib.resources.files(package)
        except (ModuleNotFoundError, TypeError, ValueError) as e:
            logger.debug(f"No resources for package {package}: {e}")
            return None

        endings = tuple(e.lower() for e in DEFAULT_SETTINGS["files"]["default_resource_endings"])
        for resource in FileUtils._walk_resources(root):
            if resource.name.lower().endswith(endings):
                logger.debug(f"Found default config resource {resource.name} in {package}")
                return resource
        return None

    @staticmethod
    def load_default_tree(package: Optional[str]) -> Mapping:
        """Parse the default resource of ``package``; an empty default Mapping if there is none."""
        resource = FileUtils.find_default_resource(package)
        if resource is None:
            return Mapping(is_default=True)

        text = resource.read_text(encoding=DEFAULT_SETTINGS["files"]["encoding"])
        if not text.strip():
            return Mapping(is_default=True)

        tree = parse(text, is_default=True, source=f"{package}:{resource.name}")
        if not isinstance(tree, Mapping):
            raise ParseError("Default configuration must be a JSON object", source=f"{package}:{resource.name}")
        logger.info(f"Loaded default configuration from {package}:{resource.name}")
        return tree

    @staticmethod
    def content_digest(text: str) -> str:
        return hashlib.sha256(text.encode("utf-8")).hexdigest()


def apply_json(text: str, config: Optional[ConfigValue] = None) -> ConfigValue:
    """Merge JSON text over ``config``."""
    return merge(parse(text), config if config is not None else Mapping())


def apply_json_file(path: Union[str, Path], config: Optional[ConfigValue] = None) -> ConfigValue:
    """Merge a JSON file over ``config``."""
    return merge(parse_file(path), config if config is not None else Mapping())


def apply_from_directory(
    path: Union[str, Path],
    config: Optional[ConfigValue] = None,
    recursive: bool = False,
) -> ConfigValue:
    """
    Merge every file of a directory over ``config``.

    Files are applied in name order, later files taking precedence over
    earlier ones. With ``recursive`` subdirectories are applied first.

    Raises:
        DirectoryNotFoundError: If ``path`` is not a directory
    """
    directory = Path(path)
    if not directory.is_dir():
        raise DirectoryNotFoundError(f"No configuration directory found at: {directory}")

    if config is None:
        config = Mapping()

    entries = sorted(directory.iterdir())
    if recursive:
        for sub in entries:
            if sub.is_dir():
                logger.debug(f"Reading config directory: {sub}")
                config = apply_from_directory(sub, config, recursive=True)

    for file_path in entries:
        if file_path.is_file():
            logger.debug(f"Reading config file: {file_path}")
            config = apply_json_file(file_path, config)
    return config
