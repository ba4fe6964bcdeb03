"""
Mongo Cache - Test Doubles

In-memory collection with MongoDB update semantics and a controllable clock.
"""

import copy
import re
from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any

import bson
from pymongo.errors import OperationFailure

START_TIME = 1_700_000_000


class FakeClock:
    """Clock returning a fixed unix time until advanced."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _wire(document: Mapping[str, Any]) -> dict[str, Any]:
    """Round-trip a document through BSON, as pymongo does on write and read."""
    return bson.decode(bson.encode(document))


def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    for field, condition in query.items():
        value = document.get(field)
        if isinstance(condition, dict):
            if "$in" in condition and value not in condition["$in"]:
                return False
            if "$regex" in condition and not (isinstance(value, str) and re.search(condition["$regex"], value)):
                return False
        elif value != condition:
            return False
    return True


class FakeCollection:
    """
    In-memory stand-in for a pymongo Collection.

    Implements the operations and operators the cache store uses, including
    the TypeMismatch failure MongoDB raises for $inc on a non-numeric field.
    """

    def __init__(self, name: str = "cache") -> None:
        self.name = name
        self.documents: list[dict[str, Any]] = []
        self.indexes: list[tuple[Any, bool]] = []
        self.drop_count = 0

    def _find(self, query: Mapping[str, Any]) -> dict[str, Any] | None:
        for document in self.documents:
            if _matches(document, query):
                return document
        return None

    @staticmethod
    def _apply(document: dict[str, Any], update: Mapping[str, Any]) -> None:
        for field, amount in update.get("$inc", {}).items():
            current = document.get(field, 0)
            if isinstance(current, bool) or not isinstance(current, (int, float)):
                raise OperationFailure(
                    f"Cannot apply $inc to a value of non-numeric type. {{_id: ...}} has the field '{field}'",
                    code=14,
                )
            document[field] = current + amount
        for field, value in update.get("$set", {}).items():
            document[field] = copy.deepcopy(value)

    def _upsert(self, query: Mapping[str, Any], update: Mapping[str, Any], upsert: bool) -> dict[str, Any] | None:
        document = self._find(query)
        if document is None:
            if not upsert:
                return None
            candidate = {field: value for field, value in query.items() if not isinstance(value, dict)}
        else:
            candidate = copy.deepcopy(document)

        self._apply(candidate, update)
        # Encoding fails before anything is stored, as it does in pymongo
        stored = _wire(candidate)

        if document is None:
            self.documents.append(stored)
        else:
            index = next(i for i, d in enumerate(self.documents) if d is document)
            self.documents[index] = stored
        return stored

    def find_one(self, filter: Mapping[str, Any]) -> dict[str, Any] | None:
        document = self._find(filter)
        return _wire(document) if document is not None else None

    def find(self, filter: Mapping[str, Any]) -> list[dict[str, Any]]:
        return [_wire(d) for d in self.documents if _matches(d, filter)]

    def update_one(self, filter: Mapping[str, Any], update: Mapping[str, Any], upsert: bool = False) -> Any:
        document = self._upsert(filter, update, upsert)
        return SimpleNamespace(matched_count=int(document is not None))

    def find_one_and_update(
        self,
        filter: Mapping[str, Any],
        update: Mapping[str, Any],
        upsert: bool = False,
        return_document: bool = False,
    ) -> dict[str, Any] | None:
        before = copy.deepcopy(self._find(filter))
        document = self._upsert(filter, update, upsert)
        if not return_document:
            return before
        return _wire(document) if document is not None else None

    def delete_one(self, filter: Mapping[str, Any]) -> Any:
        document = self._find(filter)
        if document is None:
            return SimpleNamespace(deleted_count=0)
        self.documents.remove(document)
        return SimpleNamespace(deleted_count=1)

    def delete_many(self, filter: Mapping[str, Any]) -> Any:
        doomed = [d for d in self.documents if _matches(d, filter)]
        self.documents = [d for d in self.documents if d not in doomed]
        return SimpleNamespace(deleted_count=len(doomed))

    def drop(self) -> None:
        self.documents = []
        self.indexes = []
        self.drop_count += 1

    def create_index(self, keys: Any, unique: bool = False) -> str:
        self.indexes.append((keys, unique))
        return f"{keys}_1"

    def raw(self, storage_key: str) -> dict[str, Any] | None:
        """Direct lookup bypassing the store."""
        return self.find_one({"key": storage_key})

