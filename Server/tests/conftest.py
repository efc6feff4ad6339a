"""
Pytest configuration and fixtures for the Modle server tests.

Provides a controllable UTC clock, an in-memory player store, a small
puzzle catalogue and a Flask test client with signed identity tokens.

Usage:
    # Run all tests from the repository root
    pytest

    # Run one module
    pytest Server/tests/test_session_service.py -v
"""

# IMPORTANT: Set environment variables BEFORE any modle imports happen.
# The game logger opens its log file when modle.utils is first imported.
import os
import sys
import tempfile

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="modle-logs-"))

SERVER_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if SERVER_DIR not in sys.path:
    sys.path.insert(0, SERVER_DIR)

import datetime
from typing import Any, Dict, Iterator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from modle import create_app
from modle.config import TestingConfig
from modle.services import initialize_services
from modle.services.auth_service import get_auth_service
from modle.services.daily_lock import DailyLockCoordinator
from modle.services.player_store import MemoryPlayerStore
from modle.services.puzzle_repository import JsonPuzzleRepository
from modle.services.session_service import GameSessionService
from modle.services.status_service import StatusQueryService

START_DATE = datetime.date(2024, 5, 1)

ENGLISH_HINTS = [
    "Epic set in the ancient kingdom of Mahishmati",
    "A son discovers his royal heritage",
    "Directed by S. S. Rajamouli",
    "Famous for a giant waterfall climb",
    "Why did Kattappa kill him?",
]


class FixedClock:
    """Callable standing in for the server's UTC date."""

    def __init__(self, day: datetime.date = START_DATE):
        self.day = day

    def __call__(self) -> datetime.date:
        return self.day

    def advance(self, days: int = 1) -> datetime.date:
        self.day += datetime.timedelta(days=days)
        return self.day

    @property
    def iso(self) -> str:
        return self.day.isoformat()


def make_catalogue() -> Dict[str, Any]:
    """One puzzle per language, so every date resolves to the same puzzle."""
    return {
        "English": {"rotation": [{"answer": "BAHUBALI", "hints": list(ENGLISH_HINTS)}]},
        "Hindi": {"rotation": [{"answer": "JAB WE MET", "hints": ["Train journey", "Geet", "Aditya"]}]},
        "Tamil": {"rotation": [{"answer": "ANNIYAN", "hints": ["Split personality", "Vikram", "Shankar"]}]},
        "Telugu": {"rotation": [{"answer": "EEGA", "hints": ["A housefly seeks revenge"]}]},
    }


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def catalogue() -> Dict[str, Any]:
    return make_catalogue()


@pytest.fixture
def store() -> MemoryPlayerStore:
    return MemoryPlayerStore()


@pytest.fixture
def puzzles(catalogue) -> JsonPuzzleRepository:
    return JsonPuzzleRepository(catalogue)


@pytest.fixture
def daily_lock() -> DailyLockCoordinator:
    return DailyLockCoordinator()


@pytest.fixture
def session_service(store, puzzles, clock, daily_lock) -> GameSessionService:
    return GameSessionService(store, puzzles, today=clock, lock_timeout=1.0, lock=daily_lock)


@pytest.fixture
def status_service(store, clock, daily_lock) -> StatusQueryService:
    return StatusQueryService(store, today=clock, lock=daily_lock)


@pytest.fixture
def app(store, puzzles, clock) -> Iterator[Flask]:
    """Flask app with services wired to the in-memory store and fixed clock."""
    initialize_services(TestingConfig, store=store, puzzles=puzzles, today=clock)
    flask_app = create_app(TestingConfig)
    yield flask_app


@pytest.fixture
def client(app) -> FlaskClient:
    return app.test_client()


def auth_headers(user_id: str = "user-1", **claims: Any) -> Dict[str, str]:
    """Authorization header carrying a token for ``user_id`` plus any extra claims."""
    token = get_auth_service().issue_token(user_id, username=user_id, **claims)
    return {"Authorization": f"Bearer {token}"}


def legacy_player_document(day: str = "2024-05-01") -> Dict[str, Any]:
    """
    Player document in the shape older servers wrote: English won on ``day``
    and the ``_global`` marker is only ``{date, correct}``.
    """
    return {
        "version": 0,
        "modle": {
            "English": {
                "lastPlayed": day,
                "streak": 1,
                "history": {day: {"guesses": ["BAHUBALI"], "guessesStatus": [True], "correct": True}},
            },
            "_global": {
                "lastPlayed": day,
                "streak": 1,
                "history": {day: {"date": day, "correct": True}},
            },
        },
    }


def seed_legacy_player(store, user_id: str = "user-1", day: str = "2024-05-01") -> None:
    from modle.models.attempt import PlayerRecord

    store.save(PlayerRecord.from_document(user_id, legacy_player_document(day)))
