"""
Mongo Cache - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config
from .schemas import (
    Environment,
    FlushScope,
    LogLevel,
    MongoCacheConfig,
    SerializerName,
    Settings,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    # Main config
    "Settings",
    # Enums
    "Environment",
    "FlushScope",
    "LogLevel",
    "SerializerName",
    # Config sections
    "MongoCacheConfig",
]
