"""
Services Package

Contains all business logic and service classes.
"""

from .auth_service import AuthService, get_auth_service, initialize_auth_service
from .daily_lock import DailyLockCoordinator
from .player_store import MemoryPlayerStore, MongoPlayerStore, connect_mongo
from .puzzle_repository import JsonPuzzleRepository, MongoPuzzleRepository, seed_catalogue
from .session_service import GameSessionService, get_session_service, initialize_session_service
from .status_service import StatusQueryService, get_status_service, initialize_status_service

_puzzle_repository = None


def get_puzzle_repository():
    """Get the global puzzle repository instance."""
    return _puzzle_repository


def initialize_services(config_class, store=None, puzzles=None, today=None):
    """
    Build and register every service from a configuration class.

    Args:
        config_class: Configuration class (see modle.config)
        store: Player store override; defaults to MongoDB when MONGO_URI is set
        puzzles: Puzzle repository override
        today: Clock override returning the current UTC date

    Returns:
        Tuple of (session_service, status_service)
    """
    global _puzzle_repository

    db = None
    if config_class.MONGO_URI and (store is None or (puzzles is None and config_class.PUZZLE_SOURCE == 'mongo')):
        db = connect_mongo(config_class.MONGO_URI, config_class.MONGO_DB_NAME)

    if store is None:
        store = MongoPlayerStore(db) if db is not None else MemoryPlayerStore()

    if puzzles is None:
        if config_class.PUZZLE_SOURCE == 'mongo' and db is not None:
            puzzles = MongoPuzzleRepository(db)
        else:
            puzzles = JsonPuzzleRepository.from_file(config_class.PUZZLE_FILE)
    _puzzle_repository = puzzles

    clock = {'today': today} if today is not None else {}
    lock = DailyLockCoordinator()

    initialize_auth_service(config_class.JWT_SECRET, config_class.JWT_ALGORITHM)
    session_service = initialize_session_service(
        store, puzzles,
        max_hints=config_class.MAX_HINTS,
        lock_timeout=config_class.LOCK_TIMEOUT_SECONDS,
        lock=lock,
        **clock
    )
    status_service = initialize_status_service(store, lock=lock, **clock)
    return session_service, status_service


__all__ = [
    'AuthService', 'get_auth_service', 'initialize_auth_service',
    'DailyLockCoordinator',
    'MemoryPlayerStore', 'MongoPlayerStore', 'connect_mongo',
    'JsonPuzzleRepository', 'MongoPuzzleRepository', 'get_puzzle_repository', 'seed_catalogue',
    'GameSessionService', 'get_session_service', 'initialize_session_service',
    'StatusQueryService', 'get_status_service', 'initialize_status_service',
    'initialize_services'
]
