"""Reference cache and its backend adapter."""

from .adapter import RemoteStoreAdapter
from .cache import CacheSnapshot, ReferenceStore
from .errors import StoreError
from .refresh import RefreshController

__all__ = [
    "CacheSnapshot",
    "RefreshController",
    "ReferenceStore",
    "RemoteStoreAdapter",
    "StoreError",
]
