"""
Mongo Cache - MongoDB-backed cache store

Stores cache entries as documents in a MongoDB collection, with key
prefixing, lazy expiration, server-side counters and "forever" entries.

Usage:
    from mongo_cache import create_store

    store = create_store()
    store.put("key", "value", minutes=60)
    value = store.get("key")
"""

__version__ = "1.0.0"

from .errors import (
    BulkWriteError,
    CacheError,
    ConfigurationError,
    MalformedPayloadError,
    MongoCacheError,
    ValidationError,
)
from .factory import (
    build_connection_uri,
    close_all_stores,
    create_store,
    get_store,
    list_store_instances,
    reset_store_factory,
)
from .interface import CacheStoreInterface, DocumentCollection
from .log_setup import configure_logging
from .serializers import JsonSerializer, PickleSerializer, Serializer
from .store import FOREVER_TIMESTAMP, CacheStore

__all__ = [
    # Store
    "CacheStore",
    "CacheStoreInterface",
    "DocumentCollection",
    "FOREVER_TIMESTAMP",
    # Factory functions
    "create_store",
    "get_store",
    "close_all_stores",
    "list_store_instances",
    "reset_store_factory",
    "build_connection_uri",
    # Serializers
    "Serializer",
    "PickleSerializer",
    "JsonSerializer",
    # Errors
    "MongoCacheError",
    "ConfigurationError",
    "ValidationError",
    "CacheError",
    "MalformedPayloadError",
    "BulkWriteError",
    # Logging
    "configure_logging",
]
