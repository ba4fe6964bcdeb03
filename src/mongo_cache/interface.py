"""
Mongo Cache - Interfaces

Defines the document-store abstraction the cache store is written against,
and the abstract cache contract exposed to the caching layer.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, Protocol


class DocumentCollection(Protocol):
    """
    Minimal document collection used by the cache store.

    pymongo's Collection satisfies this protocol; tests supply an in-memory
    implementation.
    """

    @property
    def name(self) -> str: ...

    def find_one(self, filter: Mapping[str, Any]) -> dict[str, Any] | None: ...

    def find(self, filter: Mapping[str, Any]) -> Iterable[dict[str, Any]]: ...

    def update_one(self, filter: Mapping[str, Any], update: Mapping[str, Any], upsert: bool = False) -> Any: ...

    def find_one_and_update(
        self,
        filter: Mapping[str, Any],
        update: Mapping[str, Any],
        upsert: bool = False,
        return_document: bool = False,
    ) -> dict[str, Any] | None: ...

    def delete_one(self, filter: Mapping[str, Any]) -> Any: ...

    def delete_many(self, filter: Mapping[str, Any]) -> Any: ...

    def drop(self) -> None: ...

    def create_index(self, keys: Any, unique: bool = False) -> str: ...


class CacheStoreInterface(ABC):
    """
    Abstract base class for cache stores.

    This is the full contract an integrating caching layer binds against.
    Keys are logical keys; stores apply their own prefix.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key

        Returns:
            Cached value if found and not expired, None otherwise
        """

    @abstractmethod
    def put(self, key: str, value: Any, minutes: int) -> None:
        """
        Store a value in the cache.

        Args:
            key: Cache key
            value: Value to cache
            minutes: Lifetime in minutes (0 = forever)
        """

    @abstractmethod
    def increment(self, key: str, value: int | float = 1) -> int | float:
        """
        Increment a numeric value, seeding a forever entry when absent.

        Returns:
            The value after incrementing
        """

    @abstractmethod
    def decrement(self, key: str, value: int | float = 1) -> int | float:
        """
        Decrement a numeric value, seeding a forever entry when absent.

        Returns:
            The value after decrementing
        """

    @abstractmethod
    def forever(self, key: str, value: Any) -> None:
        """Store a value that never expires."""

    @abstractmethod
    def forget(self, key: str) -> bool:
        """
        Remove a key from the cache.

        Returns:
            True if an entry was removed, False if the key didn't exist
        """

    @abstractmethod
    def flush(self) -> bool:
        """
        Remove all entries from the cache.

        Returns:
            True once the flush completed
        """

    @abstractmethod
    def get_prefix(self) -> str:
        """Return the prefix prepended to every key."""

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics (hits, misses, writes, ...)."""

    @abstractmethod
    def close(self) -> None:
        """Release resources held by the store."""

    def has(self, key: str) -> bool:
        """Check if a key is present and not expired."""
        return self.get(key) is not None

    def many(self, keys: list[str]) -> dict[str, Any | None]:
        """
        Retrieve multiple values from the cache.

        Default implementation calls get() for each key.
        Stores can override for better performance.

        Args:
            keys: List of cache keys

        Returns:
            Dictionary mapping every requested key to its value (None when missing)
        """
        return {key: self.get(key) for key in keys}

    def put_many(self, values: Mapping[str, Any], minutes: int) -> bool:
        """
        Store multiple values in the cache, in order.

        Default implementation calls put() for each item.

        Args:
            values: Dictionary mapping keys to values
            minutes: Lifetime in minutes applied to every item (0 = forever)

        Returns:
            True once every item was stored
        """
        for key, value in values.items():
            self.put(key, value, minutes)
        return True
