"""
Mongo Cache - Store Factory

Canonical factory for creating cache stores based on configuration.

Key points:
- Builds the MongoDB connection URI from host and optional credentials
- Selects the configured database and collection
- Keeps a registry of named stores so each name is built once
- All configuration is typed and validated via Pydantic models

Examples:
    from mongo_cache.factory import create_store

    # Uses env-configured settings (MONGO_CACHE_HOST, MONGO_CACHE_PREFIX, ...)
    store = create_store()

    # Or explicitly supply a MongoCacheConfig (e.g., for tests)
    from mongo_cache.config import MongoCacheConfig
    cfg = MongoCacheConfig(host="db:27017", database="app", collection="cache", prefix="app:")
    app_store = create_store(cfg, name="app")
"""

from __future__ import annotations

import logging
from urllib.parse import quote_plus

from pymongo import MongoClient

from .config import MongoCacheConfig, SerializerName, get_config
from .errors import ConfigurationError
from .serializers import get_serializer
from .store import CacheStore

logger = logging.getLogger(__name__)

_URI_SCHEMES = ("mongodb://", "mongodb+srv://")

# Global store instances registry
_store_instances: dict[str, CacheStore] = {}


def build_connection_uri(host: str, username: str | None = None, password: str | None = None) -> str:
    """
    Build a MongoDB connection URI.

    Credentials are only used when both username and password are non-empty,
    and are percent-encoded. A host that is already a full URI is returned
    unchanged.
    """
    if host.startswith(_URI_SCHEMES):
        return host

    uri = "mongodb://"
    if username and password:
        uri += f"{quote_plus(username)}:{quote_plus(password)}@"
    return uri + host


def _create_client(config: MongoCacheConfig) -> MongoClient:
    """Internal helper to construct a MongoClient (connects lazily)."""
    return MongoClient(
        build_connection_uri(config.host, config.username, config.password),
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
        connectTimeoutMS=config.connect_timeout_ms,
    )


def create_store(
    config: MongoCacheConfig | None = None,
    name: str = "default",
    client: MongoClient | None = None,
) -> CacheStore:
    """
    Create a cache store based on configuration.

    Args:
        config: Cache configuration (uses global config if not provided)
        name: Store instance name (for multiple stores)
        client: Existing MongoClient to use; the store then does not own it

    Returns:
        Configured cache store

    Raises:
        ConfigurationError: If configuration is invalid or the store can't be built
    """
    # Return existing instance if already created
    if name in _store_instances:
        logger.debug("Returning existing cache store: %s", name)
        return _store_instances[name]

    if config is None:
        config = get_config().cache

    logger.info(
        "Creating cache store '%s' on %s.%s",
        name,
        config.database,
        config.collection,
        extra={"store_name": name, "database": config.database, "collection": config.collection},
    )

    owned_client: MongoClient | None = None
    try:
        serializer = get_serializer(SerializerName(config.serializer).value)
        if client is None:
            client = owned_client = _create_client(config)

        store = CacheStore(
            client[config.database][config.collection],
            prefix=config.prefix,
            serializer=serializer,
            flush_scope=config.flush_scope,
            client=owned_client,
            manage_indexes=config.ensure_indexes,
        )
        if config.ensure_indexes:
            store.ensure_indexes()
    except Exception as e:
        if owned_client is not None:
            owned_client.close()
        logger.error(
            "Unexpected error creating cache store '%s': %s",
            name,
            e,
            extra={"store_name": name, "host": config.host, "error": str(e)},
            exc_info=True,
        )
        raise ConfigurationError(
            f"Failed to create cache store '{name}': {e}",
            details={"store_name": name, "host": config.host, "error": str(e)},
        ) from e

    _store_instances[name] = store

    logger.info(
        "Cache store '%s' created successfully",
        name,
        extra={"store_name": name, "prefix": config.prefix},
    )

    return store


def get_store(name: str = "default") -> CacheStore:
    """
    Get an existing store by name.

    If the store doesn't exist, it is created from the global configuration.
    """
    if name not in _store_instances:
        logger.debug("Cache store '%s' not found, creating new instance", name)
        return create_store(name=name)

    return _store_instances[name]


def close_all_stores() -> None:
    """
    Close all cache stores and release their clients.

    Should be called during graceful shutdown.
    """
    if not _store_instances:
        logger.debug("No cache stores to close")
        return

    logger.info("Closing %d cache store(s)...", len(_store_instances))

    for name, store in list(_store_instances.items()):
        try:
            store.close()
            logger.info("Closed cache store: %s", name)
        except Exception as e:
            logger.error(
                "Error closing cache store '%s': %s",
                name,
                e,
                extra={"store_name": name, "error": str(e)},
                exc_info=True,
            )

    _store_instances.clear()
    logger.info("All cache stores closed")


def reset_store_factory() -> None:
    """
    Reset the factory by clearing all store references.

    Does NOT call close() on stores - use close_all_stores() for proper cleanup.

    Warning: Only use this in testing contexts.
    """
    count = len(_store_instances)
    _store_instances.clear()
    logger.debug("Reset store factory, cleared %d instance reference(s)", count)


def list_store_instances() -> list[str]:
    """List all registered store names."""
    return list(_store_instances.keys())
