"""
Mongo Cache - Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration is read from environment variables and validated at startup.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class FlushScope(str, Enum):
    """What flush() removes."""

    COLLECTION = "collection"  # Drops the whole collection, every prefix included
    PREFIX = "prefix"


class SerializerName(str, Enum):
    """Supported payload serializers."""

    PICKLE = "pickle"
    JSON = "json"


class MongoCacheConfig(BaseModel):
    """MongoDB cache store configuration."""

    host: str = Field(default="localhost:27017", description="MongoDB host[:port] or full mongodb:// URI")
    username: str | None = Field(default=None, description="MongoDB username")
    password: str | None = Field(default=None, description="MongoDB password")
    database: str = Field(default="cache", min_length=1, description="Database holding the cache collection")
    collection: str = Field(default="cache", min_length=1, description="Collection holding cache entries")
    prefix: str = Field(default="", description="String prepended to every cache key")

    serializer: SerializerName = Field(default=SerializerName.PICKLE, description="Codec for non-numeric payloads")
    flush_scope: FlushScope = Field(
        default=FlushScope.COLLECTION,
        description="'collection' drops the whole collection, 'prefix' deletes only this prefix",
    )
    ensure_indexes: bool = Field(default=True, description="Create the unique index on 'key' at startup")

    server_selection_timeout_ms: int = Field(default=5000, ge=1, description="Server selection timeout (ms)")
    connect_timeout_ms: int = Field(default=5000, ge=1, description="Connection timeout (ms)")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Reject blank hosts."""
        v = v.strip()
        if not v:
            raise ValueError("host must not be empty")
        return v

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)


class Settings(BaseModel):
    """Root configuration."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    cache: MongoCacheConfig = Field(default_factory=MongoCacheConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
