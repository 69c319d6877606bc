import pytest
from pymongo.errors import PyMongoError

import database
from database import MemoryBlobStore, MongoBlobStore, PersistenceError, get_blob_store


class FakeCollection:
    def __init__(self, fail=False):
        self.docs = {}
        self.fail = fail

    def find_one(self, query):
        if self.fail:
            raise PyMongoError("connection refused")
        return self.docs.get(query["key"])

    def update_one(self, query, update, upsert=False):
        if self.fail:
            raise PyMongoError("connection refused")
        assert upsert
        doc = self.docs.setdefault(query["key"], {"key": query["key"]})
        doc.update(update["$set"])


class FakeDatabase(dict):
    def __missing__(self, name):
        self[name] = FakeCollection()
        return self[name]


def test_memory_blob_store():
    blobs = MemoryBlobStore({"habits": "[]"})
    assert blobs.get("habits") == "[]"
    assert blobs.get("assessment") is None
    blobs.set("assessment", "{}")
    assert blobs.get("assessment") == "{}"


def test_mongo_blob_store_upserts_by_key():
    fake = FakeDatabase()
    blobs = MongoBlobStore(fake)
    assert blobs.get("habits") is None
    blobs.set("habits", "[]")
    blobs.set("habits", '[{"id": "1"}]')
    assert blobs.get("habits") == '[{"id": "1"}]'
    assert "updated_at" in fake["snapshot"].docs["habits"]


def test_mongo_errors_become_persistence_errors():
    fake = FakeDatabase(snapshot=FakeCollection(fail=True))
    blobs = MongoBlobStore(fake)
    with pytest.raises(PersistenceError):
        blobs.get("habits")
    with pytest.raises(PersistenceError):
        blobs.set("habits", "[]")


def test_get_blob_store_picks_backend(monkeypatch):
    monkeypatch.setattr(database, "db", None)
    assert isinstance(get_blob_store(), MemoryBlobStore)
    monkeypatch.setattr(database, "db", FakeDatabase())
    assert isinstance(get_blob_store(), MongoBlobStore)
