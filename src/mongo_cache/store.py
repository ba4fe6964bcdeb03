"""
Mongo Cache - Cache Store

Key/value/TTL cache implemented on top of a MongoDB collection, with:
- One document per prefixed key, always written by upsert
- Lazy expiration: expired entries are deleted by the read that finds them
- Server-side $inc counters (plain numbers are stored as native BSON numbers)
- "Forever" entries stored with a far-future sentinel expiration
- Bulk reads in a single round trip

Document layout:
    {"key": "<prefix><key>", "cache_data": <bytes | number>, "expire": <unix ts>, "ttl": <seconds>}

Example:
    store = CacheStore(client["app"]["cache"], prefix="app:")
    store.put("greeting", {"msg": "hello"}, minutes=10)
    store.increment("visits")
    value = store.get("greeting")
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Mapping
from typing import Any

from pymongo import MongoClient, ReturnDocument
from pymongo.errors import OperationFailure

from .config.schemas import FlushScope
from .errors import BulkWriteError, MalformedPayloadError, ValidationError
from .interface import CacheStoreInterface, DocumentCollection
from .serializers import PickleSerializer, Serializer

logger = logging.getLogger(__name__)

# Expiration stored for entries that never expire
FOREVER_TIMESTAMP = 9999999999

# MongoDB error code raised when $inc targets a non-numeric field
TYPE_MISMATCH_CODE = 14


# Range of integers BSON can hold natively (int64)
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _is_number(value: Any) -> bool:
    """True for plain int/float values that BSON stores natively; subclasses go through the serializer."""
    if type(value) is float:
        return True
    return type(value) is int and _INT64_MIN <= value <= _INT64_MAX


class CacheStore(CacheStoreInterface):
    """
    Cache store persisting entries as documents in a MongoDB collection.

    Notes:
    - The prefix is prepended to every key exactly once, with no separator.
    - minutes == 0 always means "forever", never "expire immediately".
    - Storage errors from pymongo propagate unmodified; absence is None.
    - The store keeps no cached entries; every call is a round trip.
    """

    def __init__(
        self,
        collection: DocumentCollection,
        prefix: str = "",
        serializer: Serializer | None = None,
        clock: Callable[[], float] = time.time,
        flush_scope: FlushScope | str = FlushScope.COLLECTION,
        client: MongoClient | None = None,
        manage_indexes: bool = False,
    ) -> None:
        """
        Initialize the cache store.

        Args:
            collection: Collection holding the cache entries
            prefix: String prepended to every key
            serializer: Codec for non-numeric payloads (pickle by default)
            clock: Returns the current unix time in seconds
            flush_scope: Whether flush() drops the collection or only this prefix
            client: Owning MongoClient, closed by close()
            manage_indexes: Recreate the unique key index after a collection drop
        """
        self._collection = collection
        self._prefix = prefix or ""
        self._serializer = serializer or PickleSerializer()
        self._clock = clock
        self._client = client
        self._manage_indexes = manage_indexes
        self.flush_scope = FlushScope(flush_scope)

        # Stats
        self._hits = 0
        self._misses = 0
        self._writes = 0
        self._deletes = 0
        self._evictions = 0

    # ------------ Helpers ------------

    def _make_key(self, key: str) -> str:
        """Create prefixed storage key."""
        if not key:
            raise ValidationError("Cache key must be a non-empty string", {"key": key})
        return f"{self._prefix}{key}"

    def _now(self) -> int:
        return int(self._clock())

    @staticmethod
    def _validate_minutes(minutes: int) -> None:
        if minutes < 0:
            raise ValidationError(
                f"Cache lifetime must not be negative, got {minutes} minute(s)",
                {"minutes": minutes},
            )

    def _expires_at(self, ttl: int) -> int:
        """Absolute expiration for a TTL in seconds (0 -> forever)."""
        if ttl == 0:
            return FOREVER_TIMESTAMP
        return self._now() + ttl

    @staticmethod
    def _is_expired(entry: Mapping[str, Any], now: int) -> bool:
        expire = entry.get("expire")
        return expire is not None and now >= expire

    def _encode(self, value: Any) -> Any:
        if _is_number(value):
            return value
        return self._serializer.dumps(value)

    def _decode(self, key: str, data: Any) -> Any:
        if _is_number(data):
            return data
        if not isinstance(data, (bytes, bytearray)):
            raise MalformedPayloadError(
                key,
                f"expected serialized bytes, found {type(data).__name__}",
                {"serializer": self._serializer.name},
            )
        try:
            return self._serializer.loads(bytes(data))
        except Exception as e:
            raise MalformedPayloadError(
                key,
                f"{self._serializer.name} serializer could not decode payload: {e}",
                {"serializer": self._serializer.name},
            ) from e

    def _entry_fields(self, value: Any, minutes: int) -> dict[str, Any]:
        ttl = minutes * 60
        return {
            "cache_data": self._encode(value),
            "expire": self._expires_at(ttl),
            "ttl": ttl,
        }

    def _evict(self, storage_key: str) -> None:
        self._collection.delete_one({"key": storage_key})
        self._evictions += 1
        logger.debug("Evicted expired cache entry '%s'", storage_key, extra={"key": storage_key})

    def _find_entry(self, key: str) -> dict[str, Any] | None:
        """Return the live entry for a key, evicting it if it has expired."""
        storage_key = self._make_key(key)
        entry = self._collection.find_one({"key": storage_key})
        if entry is None:
            return None
        if self._is_expired(entry, self._now()):
            self._evict(storage_key)
            return None
        return entry

    def _prefix_filter(self) -> dict[str, Any]:
        if not self._prefix:
            return {}
        return {"key": {"$regex": f"^{re.escape(self._prefix)}"}}

    # ------------ Core Interface ------------

    def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        entry = self._find_entry(key)
        if entry is None:
            self._misses += 1
            return None

        self._hits += 1
        return self._decode(key, entry.get("cache_data"))

    def has(self, key: str) -> bool:
        """Check if a key is present and not expired."""
        return self._find_entry(key) is not None

    def put(self, key: str, value: Any, minutes: int) -> None:
        """Store a value for the given number of minutes (0 = forever)."""
        self._validate_minutes(minutes)
        self._collection.update_one(
            {"key": self._make_key(key)},
            {"$set": self._entry_fields(value, minutes)},
            upsert=True,
        )
        self._writes += 1

    def increment(self, key: str, value: int | float = 1) -> int | float:
        """Increment the value of an item in the cache."""
        return self._adjust(key, value, "increment")

    def decrement(self, key: str, value: int | float = 1) -> int | float:
        """Decrement the value of an item in the cache."""
        return self._adjust(key, value, "decrement")

    def _adjust(self, key: str, value: int | float, operation: str) -> int | float:
        """
        Apply a counter change with a single server-side $inc.

        The entry is read first so that an expired entry is evicted and the
        stored TTL can be renewed from now. An absent key is seeded as a
        forever entry holding +value / -value.
        """
        if not _is_number(value):
            raise MalformedPayloadError(
                key,
                f"{operation} amount must be numeric, got {type(value).__name__}",
            )

        entry = self._find_entry(key)
        ttl = int(entry.get("ttl") or 0) if entry is not None else 0
        delta = value if operation == "increment" else -value
        storage_key = self._make_key(key)

        if entry is None:
            logger.debug(
                "Seeding counter '%s' as a forever entry",
                storage_key,
                extra={"key": storage_key, "operation": operation},
            )

        try:
            updated = self._collection.find_one_and_update(
                {"key": storage_key},
                {
                    "$inc": {"cache_data": delta},
                    "$set": {"expire": self._expires_at(ttl), "ttl": ttl},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except OperationFailure as e:
            if e.code == TYPE_MISMATCH_CODE:
                raise MalformedPayloadError(
                    key,
                    f"cannot {operation} a non-numeric value",
                    {"operation": operation},
                ) from e
            raise

        self._writes += 1
        return updated["cache_data"]

    def forever(self, key: str, value: Any) -> None:
        """Store an item in the cache indefinitely."""
        self.put(key, value, 0)

    def forget(self, key: str) -> bool:
        """Remove an item from the cache."""
        result = self._collection.delete_one({"key": self._make_key(key)})
        deleted = result.deleted_count > 0
        if deleted:
            self._deletes += 1
        return deleted

    def flush(self) -> bool:
        """
        Remove all items from the cache.

        With FlushScope.COLLECTION the whole collection is dropped, including
        entries written under other prefixes. With FlushScope.PREFIX only the
        documents whose key starts with this store's prefix are deleted.
        """
        collection_name = self._collection.name

        if self.flush_scope == FlushScope.PREFIX:
            result = self._collection.delete_many(self._prefix_filter())
            self._deletes += result.deleted_count
            logger.info(
                "Flushed %d cache entries with prefix '%s'",
                result.deleted_count,
                self._prefix,
                extra={"collection": collection_name, "prefix": self._prefix},
            )
            return True

        logger.warning(
            "Dropping cache collection '%s': entries of every prefix are removed",
            collection_name,
            extra={"collection": collection_name, "prefix": self._prefix},
        )
        self._collection.drop()
        if self._manage_indexes:
            self.ensure_indexes()
        return True

    def get_prefix(self) -> str:
        """Get the cache key prefix."""
        return self._prefix

    def ensure_indexes(self) -> None:
        """Create the unique index on the entry key."""
        self._collection.create_index("key", unique=True)

    def get_stats(self) -> dict[str, Any]:
        """Return in-process cache statistics."""
        total_requests = self._hits + self._misses
        return {
            "backend": "mongodb",
            "collection": self._collection.name,
            "prefix": self._prefix,
            "flush_scope": self.flush_scope.value,
            "serializer": self._serializer.name,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "writes": self._writes,
            "deletes": self._deletes,
            "evictions": self._evictions,
        }

    def close(self) -> None:
        """Close the owning MongoClient, if any."""
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.info(
            "Closed MongoDB client for cache collection '%s'",
            self._collection.name,
            extra={"collection": self._collection.name},
        )

    # ------------ Batch operations ------------

    def many(self, keys: list[str]) -> dict[str, Any | None]:
        """
        Retrieve multiple items in one round trip.

        Every requested key is present in the result; missing and expired
        keys map to None. Expired entries found are evicted. A cached None
        cannot be told apart from a missing key and is counted as a miss.
        """
        if not keys:
            return {}

        storage_keys = {self._make_key(key): key for key in keys}
        result: dict[str, Any | None] = dict.fromkeys(keys)
        now = self._now()
        expired: list[str] = []

        for entry in self._collection.find({"key": {"$in": list(storage_keys)}}):
            key = storage_keys.get(entry["key"])
            if key is None:
                continue
            if self._is_expired(entry, now):
                expired.append(entry["key"])
                continue
            result[key] = self._decode(key, entry.get("cache_data"))

        for storage_key in expired:
            self._evict(storage_key)

        found = sum(1 for value in result.values() if value is not None)
        self._hits += found
        self._misses += len(result) - found
        return result

    def put_many(self, values: Mapping[str, Any], minutes: int) -> bool:
        """
        Store multiple items, in order, for the given number of minutes.

        Not transactional: if a write fails, the items stored before it stay
        committed and BulkWriteError is raised for the failing key.
        """
        self._validate_minutes(minutes)
        written: list[str] = []

        for key, value in values.items():
            try:
                self.put(key, value, minutes)
            except Exception as e:
                logger.error(
                    "Bulk cache write failed at key '%s' after %d write(s): %s",
                    key,
                    len(written),
                    e,
                    extra={"key": key, "written_keys": written, "error": str(e)},
                    exc_info=True,
                )
                raise BulkWriteError(key, written, e) from e
            written.append(key)

        return True
