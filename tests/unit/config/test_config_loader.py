"""
Mongo Cache - Configuration Tests

Tests environment loading, defaults and validation of the config models.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from mongo_cache.config import FlushScope, MongoCacheConfig, SerializerName, get_config, load_config, reload_config
from mongo_cache.errors import ConfigurationError

_ENV_VARS = [
    "MONGO_CACHE_HOST",
    "MONGO_CACHE_USERNAME",
    "MONGO_CACHE_PASSWORD",
    "MONGO_CACHE_DATABASE",
    "MONGO_CACHE_COLLECTION",
    "MONGO_CACHE_PREFIX",
    "MONGO_CACHE_SERIALIZER",
    "MONGO_CACHE_FLUSH_SCOPE",
    "MONGO_CACHE_ENSURE_INDEXES",
    "MONGO_CACHE_SERVER_SELECTION_TIMEOUT_MS",
    "MONGO_CACHE_CONNECT_TIMEOUT_MS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run each test from an empty directory with no cache variables set."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestMongoCacheConfig:
    """Schema defaults and validation."""

    def test_defaults(self) -> None:
        config = MongoCacheConfig()

        assert config.host == "localhost:27017"
        assert config.username is None
        assert config.database == "cache"
        assert config.collection == "cache"
        assert config.prefix == ""
        assert config.serializer == SerializerName.PICKLE
        assert config.flush_scope == FlushScope.COLLECTION
        assert config.ensure_indexes is True

    def test_blank_host_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            MongoCacheConfig(host="   ")

    def test_unknown_flush_scope_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            MongoCacheConfig(flush_scope="everything")  # type: ignore[arg-type]


class TestLoadConfig:
    """Environment loading."""

    def test_load_from_environment(self, mock_env_mongo: None) -> None:
        settings = reload_config()

        assert settings.environment == "test"
        assert settings.cache.host == "db.internal:27017"
        assert settings.cache.database == "app"
        assert settings.cache.collection == "cache_entries"
        assert settings.cache.prefix == "test:"
        assert settings.cache.flush_scope == "prefix"

    def test_blank_credentials_are_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MONGO_CACHE_USERNAME", "")
        monkeypatch.setenv("MONGO_CACHE_PASSWORD", "")

        settings = reload_config()

        assert settings.cache.username is None
        assert settings.cache.password is None

    def test_load_from_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / "cache.env"
        env_file.write_text("MONGO_CACHE_PREFIX=fromfile:\nMONGO_CACHE_ENSURE_INDEXES=false\n")

        settings = reload_config(env_file=str(env_file))

        assert settings.cache.prefix == "fromfile:"
        assert settings.cache.ensure_indexes is False

    def test_config_is_cached(self) -> None:
        first = reload_config()

        assert load_config() is first
        assert get_config() is first

    def test_invalid_value_raises_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MONGO_CACHE_SERIALIZER", "yaml")

        with pytest.raises(ConfigurationError) as exc_info:
            reload_config()

        assert "validation_errors" in exc_info.value.details

    def test_non_numeric_timeout_raises_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MONGO_CACHE_CONNECT_TIMEOUT_MS", "soon")

        with pytest.raises(ConfigurationError):
            reload_config()
