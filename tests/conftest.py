"""
Mongo Cache - Test Configuration and Shared Fixtures

Provides pytest fixtures built on the in-memory test doubles.
"""

import os
from collections.abc import Generator
from typing import Any

import pytest
from fakes import FakeClock, FakeCollection

from mongo_cache.store import CacheStore

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def collection() -> FakeCollection:
    """Empty in-memory collection."""
    return FakeCollection()


@pytest.fixture
def store(collection: FakeCollection, clock: FakeClock) -> CacheStore:
    """Cache store with prefix 'app:' over the in-memory collection."""
    return CacheStore(collection, prefix="app:", clock=clock)


@pytest.fixture
def mock_env_mongo(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for the cache store."""
    monkeypatch.setenv("MONGO_CACHE_HOST", "db.internal:27017")
    monkeypatch.setenv("MONGO_CACHE_DATABASE", "app")
    monkeypatch.setenv("MONGO_CACHE_COLLECTION", "cache_entries")
    monkeypatch.setenv("MONGO_CACHE_PREFIX", "test:")
    monkeypatch.setenv("MONGO_CACHE_FLUSH_SCOPE", "prefix")


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }


@pytest.fixture(autouse=True)
def reset_store_factory() -> Generator[None, None, None]:
    """Reset store factory after each test to prevent state leakage."""
    yield
    from mongo_cache.factory import reset_store_factory

    reset_store_factory()
