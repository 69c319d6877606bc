"""
Persistence for HabitFlow

The engine only needs an opaque key-value store of JSON text blobs
(habits, userProfile, assessment). When DATABASE_URL is set the blobs live in
a MongoDB "snapshot" collection; otherwise they are kept in process memory.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Dict, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "habitflow")

SNAPSHOT_COLLECTION = "snapshot"

db = MongoClient(DATABASE_URL)[DATABASE_NAME] if DATABASE_URL else None


class PersistenceError(Exception):
    pass


class MemoryBlobStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class MongoBlobStore:
    def __init__(self, database, collection: str = SNAPSHOT_COLLECTION):
        self.collection = database[collection]

    def get(self, key: str) -> Optional[str]:
        try:
            doc = self.collection.find_one({"key": key})
        except PyMongoError as e:
            raise PersistenceError(f"Could not read {key}: {e}")
        return doc.get("value") if doc else None

    def set(self, key: str, value: str) -> None:
        try:
            self.collection.update_one(
                {"key": key},
                {"$set": {"value": value, "updated_at": datetime.now(timezone.utc)}},
                upsert=True,
            )
        except PyMongoError as e:
            raise PersistenceError(f"Could not save {key}: {e}")


def get_blob_store():
    if db is not None:
        logger.info("Using MongoDB database %s for persistence", DATABASE_NAME)
        return MongoBlobStore(db)
    logger.info("DATABASE_URL not set, keeping state in memory")
    return MemoryBlobStore()
