"""
Mongo Cache - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the process.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import Settings

logger = logging.getLogger(__name__)

_config_instance: Settings | None = None


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> Settings:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated Settings instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    # Load .env file if exists
    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                "Failed to load .env file from %s: %s",
                env_path,
                e,
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    try:
        config_dict = {
            "environment": os.getenv("ENVIRONMENT", "development"),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "cache": {
                "host": os.getenv("MONGO_CACHE_HOST", "localhost:27017"),
                "username": os.getenv("MONGO_CACHE_USERNAME") or None,
                "password": os.getenv("MONGO_CACHE_PASSWORD") or None,
                "database": os.getenv("MONGO_CACHE_DATABASE", "cache"),
                "collection": os.getenv("MONGO_CACHE_COLLECTION", "cache"),
                "prefix": os.getenv("MONGO_CACHE_PREFIX", ""),
                "serializer": os.getenv("MONGO_CACHE_SERIALIZER", "pickle"),
                "flush_scope": os.getenv("MONGO_CACHE_FLUSH_SCOPE", "collection"),
                "ensure_indexes": os.getenv("MONGO_CACHE_ENSURE_INDEXES", "true").lower() == "true",
                "server_selection_timeout_ms": int(os.getenv("MONGO_CACHE_SERVER_SELECTION_TIMEOUT_MS", "5000")),
                "connect_timeout_ms": int(os.getenv("MONGO_CACHE_CONNECT_TIMEOUT_MS", "5000")),
            },
        }
    except ValueError as e:
        logger.error("Invalid numeric configuration value: %s", e, extra={"error": str(e)})
        raise ConfigurationError(
            f"Invalid numeric configuration value: {e}",
            details={"error": str(e)},
        ) from e

    try:
        _config_instance = Settings(**config_dict)  # type: ignore[arg-type]
        logger.info(
            "Configuration loaded successfully (environment: %s)",
            _config_instance.environment,
            extra={
                "environment": _config_instance.environment,
                "database": _config_instance.cache.database,
                "collection": _config_instance.cache.collection,
            },
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            "Configuration validation failed: %s",
            e,
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
            exc_info=True,
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e


def get_config() -> Settings:
    """
    Get the current configuration instance.

    Loads configuration on first access.

    Returns:
        Current Settings instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> Settings:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded Settings instance
    """
    return load_config(env_file=env_file, reload=True)
