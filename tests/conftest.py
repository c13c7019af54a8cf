"""Shared fixtures: in-memory stand-in for the motor database and an API client.

The stand-in implements only the collection calls the repositories make
(insert/find/find_one_and_update/update/delete, `$or`/`$regex` filters, sort,
unique indexes) so the real application runs end to end without MongoDB.
"""

from __future__ import annotations

import asyncio
import copy
import os
import re
from types import SimpleNamespace
from typing import Any, Callable, Dict, List

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("PASSWORD_HASH_TIME_COST", "1")
os.environ.setdefault("PASSWORD_HASH_MEMORY_COST", "8192")
os.environ.setdefault("PASSWORD_HASH_PARALLELISM", "1")

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError, OperationFailure

from notekeeper.core import rate_limit
from notekeeper.infrastructure.db import mongo_async
from notekeeper.infrastructure.db.bootstrap import ensure_collections
from notekeeper.main import app


def _matches(doc: Dict[str, Any], filt: Dict[str, Any]) -> bool:
    for key, cond in filt.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in cond):
                return False
            continue
        value = doc.get(key)
        if isinstance(cond, dict) and "$regex" in cond:
            flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(cond["$regex"], value, flags):
                return False
        elif value != cond:
            return False
    return True


def _apply_update(doc: Dict[str, Any], update: Dict[str, Any]) -> None:
    for key, value in update.get("$set", {}).items():
        doc[key] = value
    for key, value in update.get("$inc", {}).items():
        doc[key] = doc.get(key, 0) + value


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, keys, direction=None) -> "FakeCursor":
        if isinstance(keys, str):
            keys = [(keys, direction or 1)]
        for key, order in reversed(list(keys)):
            self._docs.sort(key=lambda d: d.get(key), reverse=order == -1)
        return self

    async def to_list(self, length=None) -> List[Dict[str, Any]]:
        docs = [copy.deepcopy(d) for d in self._docs]
        return docs if length is None else docs[:length]


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: List[Dict[str, Any]] = []
        self.indexes: Dict[str, Any] = {}
        self._unique: List[List[str]] = []

    async def create_index(self, keys, unique: bool = False, name: str | None = None, **kwargs):
        self.indexes[name] = {"keys": list(keys), "unique": unique}
        if unique:
            self._unique.append([k for k, _ in keys])
        return name

    async def insert_one(self, doc: Dict[str, Any]):
        doc.setdefault("_id", ObjectId())
        for fields in self._unique:
            if any(all(d.get(f) == doc.get(f) for f in fields) for d in self.docs):
                raise DuplicateKeyError("E11000 duplicate key error", code=11000)
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, filt=None):
        for d in self.docs:
            if _matches(d, filt or {}):
                return copy.deepcopy(d)
        return None

    def find(self, filt=None) -> FakeCursor:
        return FakeCursor([d for d in self.docs if _matches(d, filt or {})])

    async def find_one_and_update(self, filt, update, return_document=None):
        for d in self.docs:
            if _matches(d, filt):
                _apply_update(d, update)
                return copy.deepcopy(d)
        return None

    async def update_one(self, filt, update):
        for d in self.docs:
            if _matches(d, filt):
                _apply_update(d, update)
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, filt):
        for i, d in enumerate(self.docs):
            if _matches(d, filt):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: Dict[str, FakeCollection] = {}
        self.validators: Dict[str, Any] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))

    async def command(self, cmd):
        if cmd == "ping" or (isinstance(cmd, dict) and "ping" in cmd):
            return {"ok": 1}
        if isinstance(cmd, dict) and "collMod" in cmd:
            if cmd["collMod"] not in self.collections:
                raise OperationFailure("ns does not exist", code=26)
            self.validators[cmd["collMod"]] = cmd["validator"]
            return {"ok": 1}
        raise OperationFailure(f"unsupported command: {cmd!r}")

    async def list_collection_names(self) -> List[str]:
        return list(self.collections)

    async def create_collection(self, name: str, validator=None, **kwargs) -> FakeCollection:
        if validator:
            self.validators[name] = validator
        return self[name]


@pytest.fixture(autouse=True)
def fake_db(monkeypatch: pytest.MonkeyPatch) -> FakeDatabase:
    db = FakeDatabase()
    monkeypatch.setattr(mongo_async, "_adb", db)
    asyncio.run(ensure_collections())
    rate_limit.reset()
    yield db
    rate_limit.reset()


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def signup(client: TestClient) -> Callable[..., Dict[str, str]]:
    """Registers a user and returns its Authorization header."""

    def _signup(email: str = "a@x.com", full_name: str = "A", password: str = "pw123456") -> Dict[str, str]:
        resp = client.post(
            "/create-account",
            json={"fullName": full_name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        return {"Authorization": f"Bearer {resp.json()['accessToken']}"}

    return _signup
