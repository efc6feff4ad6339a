"""
Tests for player persistence and per-user locking
"""

import threading
from unittest.mock import MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from modle.config import GLOBAL_STATE_KEY
from modle.errors import ConcurrencyConflict
from modle.models.attempt import DailyAttempt, PlayerRecord
from modle.services.player_store import MemoryPlayerStore, MongoPlayerStore, UserLocks


def sample_record(user_id="user-1"):
    record = PlayerRecord(user_id=user_id)
    state = record.language_state("English")
    state.history["2024-05-01"] = DailyAttempt(date="2024-05-01", guesses=["X"], guesses_status=[False])
    state.last_played_date = "2024-05-01"
    return record


class TestPlayerRecord:

    def test_document_round_trip(self):
        record = sample_record()
        record.global_state.streak = 3
        record.version = 7

        restored = PlayerRecord.from_document("user-1", record.to_document())
        assert restored == record

    def test_missing_document_is_empty(self):
        record = PlayerRecord.from_document("user-1", None)
        assert record.version == 0
        assert record.peek_global_state().streak == 0
        assert record.states == {}

    def test_legacy_last_played_key(self):
        doc = {"version": 1, "modle": {GLOBAL_STATE_KEY: {"lastPlayed": "2024-04-30", "streak": 2}}}
        record = PlayerRecord.from_document("user-1", doc)
        assert record.peek_global_state().last_played_date == "2024-04-30"


class TestMemoryPlayerStore:

    def test_save_and_load(self):
        store = MemoryPlayerStore()
        saved = store.save(sample_record())
        assert saved.version == 1

        loaded = store.load("user-1")
        assert loaded.version == 1
        assert loaded.states["English"].history["2024-05-01"].guesses == ["X"]

    def test_loaded_records_are_copies(self):
        store = MemoryPlayerStore()
        store.save(sample_record())

        loaded = store.load("user-1")
        loaded.states["English"].history["2024-05-01"].guesses.append("Y")
        assert store.load("user-1").states["English"].history["2024-05-01"].guesses == ["X"]

    def test_stale_version_conflicts(self):
        store = MemoryPlayerStore()
        store.save(sample_record())

        first = store.load("user-1")
        second = store.load("user-1")
        store.save(first)

        with pytest.raises(ConcurrencyConflict) as excinfo:
            store.save(second)
        assert excinfo.value.payload == {"expected": 1, "actual": 2}


class TestMongoPlayerStore:

    def setup_method(self):
        self.db = MagicMock()
        self.store = MongoPlayerStore(self.db)
        self.collection = self.db.modle_players

    def test_load_missing(self):
        self.collection.find_one.return_value = None
        assert self.store.load("user-1").version == 0

    def test_insert_new_record(self):
        record = self.store.save(sample_record())

        assert record.version == 1
        doc = self.collection.insert_one.call_args.args[0]
        assert doc["_id"] == "user-1"
        assert doc["version"] == 1
        assert "English" in doc["modle"]

    def test_concurrent_insert_conflicts(self):
        self.collection.insert_one.side_effect = DuplicateKeyError("dup")
        with pytest.raises(ConcurrencyConflict):
            self.store.save(sample_record())

    def test_update_checks_version(self):
        record = sample_record()
        record.version = 4
        self.collection.update_one.return_value.matched_count = 1

        self.store.save(record)

        query, update = self.collection.update_one.call_args.args
        assert query == {"_id": "user-1", "version": 4}
        assert update["$set"]["version"] == 5
        assert record.version == 5

    def test_update_conflict(self):
        record = sample_record()
        record.version = 4
        self.collection.update_one.return_value.matched_count = 0

        with pytest.raises(ConcurrencyConflict):
            self.store.save(record)
        assert record.version == 4


class TestUserLocks:

    def test_exclusive_per_user(self):
        locks = UserLocks(timeout=0.05)
        with locks.hold("user-1"):
            with pytest.raises(ConcurrencyConflict):
                with locks.hold("user-1"):
                    pass
            # Other users are unaffected
            with locks.hold("user-2"):
                assert locks.active_count() == 2
        assert locks.active_count() == 0

    def test_waits_for_release(self):
        locks = UserLocks(timeout=2.0)
        held = threading.Event()
        release = threading.Event()
        order = []

        def holder():
            with locks.hold("user-1"):
                held.set()
                release.wait(1.0)
                order.append("holder")

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(1.0)
        release.set()
        with locks.hold("user-1"):
            order.append("waiter")
        thread.join()

        assert order == ["holder", "waiter"]
        assert locks.active_count() == 0
