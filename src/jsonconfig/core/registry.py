"""
Process-wide cache of configuration stores, one per scope.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .store import GLOBAL_SCOPE, ConfigStore


logger = logging.getLogger(__name__)


class ConfigRegistry:
    """Maps scope keys to their ConfigStore, creating each store at most once."""

    def __init__(
        self,
        search_directory: Optional[Union[str, Path]] = None,
        factory: Optional[Callable[..., ConfigStore]] = None,
    ):
        self.search_directory = search_directory
        self._factory = factory or ConfigStore.for_scope
        self._stores: Dict[str, ConfigStore] = {}
        self._lock = threading.Lock()

    def get_store(self, scope_key: str) -> ConfigStore:
        """
        Get the store of ``scope_key``, creating it on first access.

        Concurrent first accesses for the same key build exactly one store.
        """
        store = self._stores.get(scope_key)
        if store is not None:
            return store

        with self._lock:
            store = self._stores.get(scope_key)
            if store is None:
                logger.debug(f"Creating configuration store for scope: {scope_key}")
                store = self._factory(scope_key, search_directory=self.search_directory)
                self._stores[scope_key] = store
        return store

    def global_store(self) -> ConfigStore:
        """Store shared by the whole process, backed by ``settings.*``."""
        return self.get_store(GLOBAL_SCOPE)

    def scopes(self) -> List[str]:
        with self._lock:
            return list(self._stores)

    def reset(self) -> None:
        """Close and forget every store."""
        with self._lock:
            stores = list(self._stores.values())
            self._stores.clear()
        for store in stores:
            store.close()
        logger.debug(f"Configuration registry reset, closed {len(stores)} stores")


_default_registry = ConfigRegistry()


def get_store(scope_key: str) -> ConfigStore:
    """Store of ``scope_key`` in the process-wide registry (e.g. ``get_store(__name__)``)."""
    return _default_registry.get_store(scope_key)


def global_store() -> ConfigStore:
    return _default_registry.global_store()


def reset_registry() -> None:
    """Forget all process-wide stores. Meant for test isolation."""
    _default_registry.reset()


def default_registry() -> ConfigRegistry:
    return _default_registry
