"""
Layered configuration store.

A ConfigStore holds an immutable default layer and the effective tree, which
is the user layer merged over the defaults. The effective tree is replaced
atomically under a reader/writer lock whenever the user layer changes, either
programmatically through ``set_user_config`` or because the backing file was
edited on disk.
"""

import importlib.util
import logging
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from PySide6.QtCore import QObject, Qt, Signal

from ..config.defaults import DEFAULT_SETTINGS
from ..model.errors import ParseError, TypeMismatchError
from ..model.values import EMPTY, ConfigValue, Mapping, from_python
from ..utils.file_utils import FileUtils
from ..utils.json_io import parse, serialize_for_save
from ..utils.locking import ReadWriteLock
from .merger import merge
from .watcher import UserConfigWatcher


logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "__global__"


class StoreState(Enum):
    """Lifecycle states of a ConfigStore."""

    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    WATCHING = "watching"


class ConfigStore(QObject):
    """Default layer plus effective tree for one scope, with live reload."""

    # Signals
    user_config_changed = Signal()  # emitted after a reload from the backing file

    def __init__(
        self,
        default_tree: Optional[Any] = None,
        name: str = "settings",
        search_directory: Optional[Union[str, Path]] = None,
    ):
        super().__init__()
        self.name = name
        self.search_directory = Path(search_directory) if search_directory else None

        if isinstance(default_tree, ConfigValue):
            # nodes keep their own flags in from_python; rebuild to tag every entry as default
            default_tree = default_tree.to_python()
        default = from_python(default_tree, is_default=True) if default_tree is not None else None
        if default is not None and not isinstance(default, Mapping):
            raise TypeMismatchError("Default configuration must be a mapping", kinds=(default.kind, "mapping"))
        self._default: Mapping = default if default is not None else Mapping(is_default=True)

        self._lock = ReadWriteLock()
        self._effective: Mapping = merge(Mapping(), self._default)
        self._state = StoreState.UNINITIALIZED

        # Watch bookkeeping, guarded by _watch_lock
        self._watch_lock = threading.Lock()
        self._suspend_count = 0
        self._applied_digest: Optional[str] = None
        self._backing_file: Optional[Path] = None
        self._watcher: Optional[UserConfigWatcher] = None

        # Serializes writers to the backing file
        self._save_lock = threading.Lock()

    @classmethod
    def for_scope(cls, scope_key: str, search_directory: Optional[Union[str, Path]] = None) -> "ConfigStore":
        """
        Build the store of a scope and load its backing file if there is one.

        The global scope reads ``settings.*`` from the working directory. Any
        other scope key is taken as a module or package name: its bundled
        ``default.json`` (or similar) is the default layer and its directory
        is searched for ``<last name part>.json`` (or similar).
        """
        package = None
        directory = None

        if scope_key == GLOBAL_SCOPE:
            name = DEFAULT_SETTINGS["files"]["global_config_name"]
        else:
            name = scope_key.rsplit(".", 1)[-1]
            try:
                spec = importlib.util.find_spec(scope_key)
            except (ImportError, ValueError) as e:
                logger.debug(f"Scope {scope_key} is not an importable module: {e}")
                spec = None
            if spec is not None:
                if spec.submodule_search_locations:
                    package = scope_key
                    directory = Path(list(spec.submodule_search_locations)[0])
                elif spec.origin and spec.origin not in ("built-in", "frozen"):
                    package = spec.parent or None
                    directory = Path(spec.origin).parent

        if search_directory is not None:
            directory = Path(search_directory)
        if directory is None:
            directory = Path.cwd()

        store = cls(FileUtils.load_default_tree(package), name=name, search_directory=directory)
        store.initialize()
        return store

    # -- locking ----------------------------------------------------------

    def _read_locked(self):
        return self._lock.read_locked()

    def _swap(self, effective: Mapping) -> None:
        with self._lock.write_locked():
            self._effective = effective

    # -- properties -------------------------------------------------------

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def backing_file(self) -> Optional[Path]:
        return self._backing_file

    @property
    def default_tree(self) -> Mapping:
        return self._default

    @property
    def effective(self) -> Mapping:
        return self.get_effective()

    @property
    def is_watch_suspended(self) -> bool:
        with self._watch_lock:
            return self._suspend_count > 0

    # -- reading ----------------------------------------------------------

    def get_effective(self) -> Mapping:
        """
        Current effective tree.

        This is the live object: assignments on it are visible to other
        readers and are written out by the next ``save()``.
        """
        with self._read_locked():
            return self._effective

    def current_scope(self) -> Mapping:
        """Deep copy of the effective tree, unaffected by later reloads."""
        with self._read_locked():
            return self._effective.copy()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'ui.window.width')
            default: Value returned when the key does not exist

        Returns:
            Plain Python value or default
        """
        node = self.get_effective().lookup(key)
        if node is EMPTY:
            return default
        return node.to_python()

    # -- lifecycle --------------------------------------------------------

    def initialize(self) -> None:
        """Load the backing file from the search directory, if one exists."""
        if self.search_directory is not None:
            backing_file = FileUtils.find_user_config(self.search_directory, self.name)
            if backing_file is not None:
                self.load_and_watch(backing_file)
                return

        self._state = StoreState.LOADED
        logger.info(f"No user config file for '{self.name}', using default configuration")

    def load_and_watch(self, path: Union[str, Path]) -> None:
        """
        Load ``path`` as the user layer and watch it for changes.

        Raises:
            ParseError: If the file cannot be read or is not a JSON object
            TypeMismatchError: If the file collides with the default layer
        """
        path = Path(path).resolve()
        text = self._read_file(path)
        effective = self._merge_user_text(text, path)

        watch_enabled = DEFAULT_SETTINGS["watch"]["enabled"]
        with self._watch_lock:
            previous = self._watcher
            self._watcher = None
            self._backing_file = path
            self._applied_digest = FileUtils.content_digest(text)

        if previous is not None:
            previous.stop()

        self._swap(effective)

        if watch_enabled:
            watcher = UserConfigWatcher(path, self._on_file_changed)
            watcher.start()
            with self._watch_lock:
                self._watcher = watcher
            self._state = StoreState.WATCHING
        else:
            self._state = StoreState.LOADED
        logger.info(f"Loaded user configuration from: {path}")

    def close(self) -> None:
        """Stop watching the backing file."""
        with self._watch_lock:
            watcher = self._watcher
            self._watcher = None
        if watcher is not None:
            watcher.stop()
        if self._state is StoreState.WATCHING:
            self._state = StoreState.LOADED

    # -- writing ----------------------------------------------------------

    def set_user_config(self, tree: Any) -> None:
        """
        Replace the user layer with ``tree`` and persist it.

        The new effective tree is ``tree`` merged over the defaults. Entries
        of ``tree`` that came from the default layer (as in a tree obtained
        from ``current_scope()``) are dropped first, so they are not merged
        over the defaults a second time. If the store has a backing file the
        non-default entries are written to it.

        Raises:
            TypeMismatchError: If ``tree`` collides with the default layer
        """
        user_tree = from_python(tree)
        if isinstance(user_tree, Mapping):
            user_tree = from_python(user_tree.non_default())
        effective = merge(user_tree, self._default)
        if not isinstance(effective, Mapping):
            raise TypeMismatchError("User configuration must be a mapping", kinds=(effective.kind, "mapping"))

        self._swap(effective)
        logger.debug(f"User configuration replaced for '{self.name}'")

        if self._backing_file is not None:
            try:
                self.save()
            except OSError as e:
                logger.warning(f"Failed to persist configuration: {e}")

    def save(self) -> None:
        """
        Write the non-default entries of the effective tree to the backing file.

        Does nothing if the store has no backing file.
        """
        path = self._backing_file
        if path is None:
            logger.debug(f"No backing file for '{self.name}', nothing to save")
            return

        with self._save_lock:
            with self._read_locked():
                text = serialize_for_save(self._effective)

            with self.watch_suspended():
                with self._watch_lock:
                    self._applied_digest = FileUtils.content_digest(text)
                try:
                    with open(path, "w", encoding=DEFAULT_SETTINGS["files"]["encoding"]) as f:
                        f.write(text)
                except OSError as e:
                    logger.error(f"Failed to save user config: {e}")
                    raise
        logger.info(f"Saved user configuration to: {path}")

    # -- watching ---------------------------------------------------------

    def suspend_watch(self) -> None:
        """Ignore file events until the matching ``resume_watch``; calls nest."""
        with self._watch_lock:
            self._suspend_count += 1

    def resume_watch(self) -> None:
        with self._watch_lock:
            if self._suspend_count > 0:
                self._suspend_count -= 1

    @contextmanager
    def watch_suspended(self) -> Iterator["ConfigStore"]:
        """Context manager around a write to the backing file."""
        self.suspend_watch()
        try:
            yield self
        finally:
            self.resume_watch()

    def subscribe(self, callback: Callable[[], None]) -> None:
        """
        Call ``callback`` after every reload from the backing file.

        The callback runs in the watcher thread; no Qt event loop is needed.
        """
        self.user_config_changed.connect(callback, Qt.ConnectionType.DirectConnection)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        self.user_config_changed.disconnect(callback)

    def _on_file_changed(self) -> None:
        with self._watch_lock:
            if self._suspend_count > 0:
                logger.debug(f"Ignoring change of {self._backing_file}: watch suspended")
                return
            path = self._backing_file
            applied_digest = self._applied_digest
        if path is None:
            return

        try:
            text = self._read_file(path)
            digest = FileUtils.content_digest(text)
            if digest == applied_digest:
                logger.debug(f"Ignoring change of {path}: content already applied")
                return
            effective = self._merge_user_text(text, path, allow_empty=False)
        except (ParseError, TypeMismatchError) as e:
            logger.warning(f"Keeping previous configuration, reload of {path} failed: {e}")
            return

        with self._watch_lock:
            # a save may have written this very content since the check above
            if self._suspend_count > 0 or self._backing_file != path or self._applied_digest == digest:
                return
            self._applied_digest = digest
        self._swap(effective)
        logger.info("User configuration has changed, updating config information")

        self.user_config_changed.emit()

    # -- helpers ----------------------------------------------------------

    @staticmethod
    def _read_file(path: Path) -> str:
        try:
            with open(path, "r", encoding=DEFAULT_SETTINGS["files"]["encoding"]) as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Cannot read config file: {e}", source=str(path)) from e

    def _merge_user_text(self, text: str, path: Path, allow_empty: bool = True) -> Mapping:
        if not text.strip():
            # a file being rewritten is briefly empty; only a first load accepts that
            if not allow_empty:
                raise ParseError("Configuration file is empty", source=str(path))
            return merge(Mapping(), self._default)
        user_tree = parse(text, source=str(path))
        if not isinstance(user_tree, Mapping):
            raise ParseError(f"Configuration file must contain a JSON object, got {user_tree.kind}", source=str(path))
        return merge(user_tree, self._default)

    def __repr__(self) -> str:
        return f"ConfigStore(name={self.name!r}, state={self._state.value}, backing_file={self._backing_file})"


__all__ = ["ConfigStore", "StoreState", "GLOBAL_SCOPE"]
