"""
Player Store

Persistence of the per-user Modle aggregate. Every save carries the
version the caller loaded; a mismatch means another writer got there
first and raises ConcurrencyConflict so the caller can reload and retry.
"""

import copy
import datetime
import threading
from typing import Dict, Optional

from pymongo.errors import DuplicateKeyError
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

from ..errors import ConcurrencyConflict
from ..models.attempt import PlayerRecord
from ..utils.game_logger import game_logger


def connect_mongo(mongo_uri: str, db_name: str):
    """
    Open a MongoDB connection and return the Modle database.

    Raises:
        pymongo.errors.PyMongoError: If the server cannot be reached
    """
    client = MongoClient(mongo_uri, server_api=ServerApi('1'))

    # Test connection
    try:
        client.admin.command('ping')
        game_logger.logger.info("Successfully connected to MongoDB")
    except Exception as e:
        game_logger.logger.error(f"MongoDB connection error: {e}")
        client.close()
        raise

    return client[db_name]


class MemoryPlayerStore:
    """In-process store for development and tests."""

    def __init__(self):
        self._documents: Dict[str, Dict] = {}
        self._lock = threading.Lock()

    def load(self, user_id: str) -> PlayerRecord:
        with self._lock:
            doc = copy.deepcopy(self._documents.get(user_id))
        return PlayerRecord.from_document(user_id, doc)

    def save(self, record: PlayerRecord) -> PlayerRecord:
        """
        Raises:
            ConcurrencyConflict: If the stored version moved since load
        """
        with self._lock:
            stored = self._documents.get(record.user_id)
            stored_version = stored['version'] if stored else 0
            if stored_version != record.version:
                raise ConcurrencyConflict(
                    "Player state changed concurrently, please retry",
                    expected=record.version, actual=stored_version,
                )
            record.version += 1
            self._documents[record.user_id] = copy.deepcopy(record.to_document())
        return record


class MongoPlayerStore:
    """Player records in the ``modle_players`` collection, one document per user."""

    def __init__(self, db):
        self.players_collection = db.modle_players

    def load(self, user_id: str) -> PlayerRecord:
        doc = self.players_collection.find_one({"_id": user_id})
        return PlayerRecord.from_document(user_id, doc)

    def save(self, record: PlayerRecord) -> PlayerRecord:
        """
        Insert a new record or update one at the expected version.

        Raises:
            ConcurrencyConflict: If the stored version moved since load
        """
        now = datetime.datetime.now(datetime.timezone.utc)
        new_version = record.version + 1

        if record.version == 0:
            doc = record.to_document()
            doc["version"] = new_version
            doc["created_at"] = now
            doc["updated_at"] = now
            try:
                self.players_collection.insert_one(doc)
            except DuplicateKeyError:
                raise ConcurrencyConflict("Player state created concurrently, please retry",
                                          expected=0)
        else:
            result = self.players_collection.update_one(
                {"_id": record.user_id, "version": record.version},
                {"$set": {
                    "modle": record.modle_document(),
                    "version": new_version,
                    "updated_at": now,
                }},
            )
            if result.matched_count == 0:
                raise ConcurrencyConflict("Player state changed concurrently, please retry",
                                          expected=record.version)

        record.version = new_version
        return record


class UserLocks:
    """
    Per-user mutual exclusion with a bounded wait.

    Entries are reference counted and dropped once no thread holds or
    waits for them, so the table only grows with concurrent users.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: Dict[str, list] = {}  # user_id -> [lock, users]

    def _checkout(self, user_id: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(user_id)
            if entry is None:
                entry = self._locks[user_id] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, user_id: str) -> None:
        with self._guard:
            entry = self._locks.get(user_id)
            if entry is not None:
                entry[1] -= 1
                if entry[1] <= 0:
                    del self._locks[user_id]

    def hold(self, user_id: str, timeout: Optional[float] = None) -> '_HeldLock':
        return _HeldLock(self, user_id, self.timeout if timeout is None else timeout)

    def active_count(self) -> int:
        with self._guard:
            return len(self._locks)


class _HeldLock:
    """Context manager returned by UserLocks.hold()."""

    def __init__(self, locks: UserLocks, user_id: str, timeout: float):
        self._locks = locks
        self._user_id = user_id
        self._timeout = timeout
        self._lock: Optional[threading.Lock] = None

    def __enter__(self):
        lock = self._locks._checkout(self._user_id)
        if not lock.acquire(timeout=self._timeout):
            self._locks._checkin(self._user_id)
            raise ConcurrencyConflict("Another request for this player is in progress, please retry")
        self._lock = lock
        return self

    def __exit__(self, exc_type, exc, tb):
        self._lock.release()
        self._locks._checkin(self._user_id)
        return False
