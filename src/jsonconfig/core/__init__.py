"""
Core components: the merge engine, the configuration store and the registry.
"""

from .merger import merge, merge_all
from .store import GLOBAL_SCOPE, ConfigStore, StoreState
from .registry import ConfigRegistry, get_store, global_store, reset_registry

__all__ = [
    "merge",
    "merge_all",
    "GLOBAL_SCOPE",
    "ConfigStore",
    "StoreState",
    "ConfigRegistry",
    "get_store",
    "global_store",
    "reset_registry",
]
