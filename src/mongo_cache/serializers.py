"""
Mongo Cache - Payload Serializers

Codecs turning cached values into the opaque bytes stored in `cache_data`.

Plain numbers never reach a serializer: the store keeps them as native BSON
numbers so counters can be adjusted server-side with $inc.
"""

import json
import pickle
from typing import Any, Protocol


class Serializer(Protocol):
    """Codec used by the store for non-numeric payloads."""

    name: str

    def dumps(self, value: Any) -> bytes: ...

    def loads(self, data: bytes) -> Any: ...


class PickleSerializer:
    """Serializes arbitrary Python objects with pickle (default)."""

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self.protocol = protocol

    def dumps(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self.protocol)

    def loads(self, data: bytes) -> Any:
        return pickle.loads(data)


class JsonSerializer:
    """
    Serializes JSON-compatible values as UTF-8 JSON.

    Use when the collection is read by non-Python consumers. Tuples come back
    as lists and dict keys as strings.
    """

    name = "json"

    def dumps(self, value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def loads(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


_SERIALIZERS: dict[str, type] = {
    PickleSerializer.name: PickleSerializer,
    JsonSerializer.name: JsonSerializer,
}


def get_serializer(name: str) -> Serializer:
    """
    Look up a serializer by its configured name.

    Raises:
        KeyError: If no serializer is registered under the name
    """
    return _SERIALIZERS[name]()
