"""
Game Session Service

Single entry point for mutating a player's Modle state. A guess is
validated against the server's UTC date, checked against the daily
cross-language lock and the attempt ledger, and persisted together with
any streak change as one unit per user.
"""

import datetime
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..config.game_settings import GLOBAL_LANGUAGE, MAX_HINTS, canonical_language, max_hints_for
from ..errors import AuthenticationError, ConcurrencyConflict, InvalidInput
from ..models.attempt import DailyAttempt, LanguageState, PlayerRecord
from ..models.puzzle import PuzzleDefinition
from ..utils.game_logger import game_logger
from ..utils.helpers import format_date, normalize, parse_date, utc_today
from . import attempt_ledger
from .daily_lock import DailyLockCoordinator
from .player_store import UserLocks


@dataclass
class GuessOutcome:
    """Authoritative state returned after an accepted guess."""
    language_name: str
    attempt: DailyAttempt
    language: LanguageState
    global_state: LanguageState
    revealed_hint_count: int
    max_hints: int
    solved_answer: Optional[str] = None
    streak_changed: bool = False

    @property
    def primary_streak(self) -> int:
        return self.global_state.streak

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': True,
            'languageName': self.language_name,
            'attempt': self.attempt.to_dict(),
            'language': self.language.to_dict(),
            'global': self.global_state.to_dict(),
            'primaryStreak': self.primary_streak,
            'revealedHintCount': self.revealed_hint_count,
            'maxHints': self.max_hints,
            'solvedAnswer': self.solved_answer,
        }


@dataclass
class HintDisclosure:
    """Hints of one puzzle, as far as the player may see them."""
    puzzle: PuzzleDefinition
    hints_revealed: int
    max_hints: int
    revealed_hint_count: int
    answer: Optional[str] = None
    attempt: Optional[DailyAttempt] = None

    @property
    def hints(self) -> List[str]:
        return list(self.puzzle.hints[:self.hints_revealed])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': True,
            'language': self.puzzle.language,
            'date': self.puzzle.date,
            'hints': self.hints,
            'hintsRevealed': self.hints_revealed,
            'maxHints': self.max_hints,
            'revealedHintCount': self.revealed_hint_count,
            'answer': self.answer,
            'meta': dict(self.puzzle.meta) if self.answer else {},
            'attempt': self.attempt.to_dict() if self.attempt else None,
        }


def resolve_language(value: Optional[str]) -> str:
    """
    Raises:
        InvalidInput: Unknown language or the reserved aggregate key
    """
    language = canonical_language(value)
    if language is None or language == GLOBAL_LANGUAGE:
        raise InvalidInput(f"Invalid language '{value}'", language=value)
    return language


class GameSessionService:
    """
    Orchestrates guesses and hint disclosure for every player.

    Attributes:
        store: Player store (MemoryPlayerStore or MongoPlayerStore)
        puzzles: Puzzle repository
        today: Clock returning the current UTC date
    """

    # One reload-and-retry after a version conflict
    SAVE_ATTEMPTS = 2

    def __init__(self, store, puzzles, today: Callable[[], datetime.date] = utc_today,
                 max_hints: int = MAX_HINTS, lock_timeout: float = 5.0,
                 lock: Optional[DailyLockCoordinator] = None):
        self.store = store
        self.puzzles = puzzles
        self.today = today
        self.max_hints = max_hints
        self.locks = UserLocks(timeout=lock_timeout)
        self.daily_lock = lock or DailyLockCoordinator()

    def _server_date(self, claimed_date: Optional[str]) -> str:
        today = format_date(self.today())
        if claimed_date is None or claimed_date == '':
            return today
        try:
            claimed = format_date(parse_date(claimed_date))
        except ValueError as e:
            raise InvalidInput(str(e), date=claimed_date)
        if claimed != today:
            raise InvalidInput("Guesses are only accepted for today's puzzle",
                               date=claimed_date, today=today)
        return today

    def _puzzle_cap(self, puzzle: PuzzleDefinition) -> int:
        return max_hints_for(len(puzzle.hints), self.max_hints)

    def submit_guess(self, user_id: str, language: str, raw_guess: str,
                     claimed_date: Optional[str] = None) -> GuessOutcome:
        """
        Evaluate and record one guess for today's puzzle.

        Args:
            user_id: Authenticated player id
            language: Puzzle language
            raw_guess: Guess text as typed
            claimed_date: Optional client date, must equal the server's date

        Returns:
            GuessOutcome with the updated attempt and streaks

        Raises:
            InvalidInput, NotFound, DailyLimitReached, GuessNotAccepted,
            AlreadyCompleted, ConcurrencyConflict
        """
        language = resolve_language(language)
        today = self._server_date(claimed_date)
        canonical_guess = normalize(raw_guess)
        if not canonical_guess:
            raise InvalidInput("Guess must contain at least one letter or digit")

        puzzle = self.puzzles.get_puzzle(language, parse_date(today))
        canonical_answer = normalize(puzzle.answer)
        cap = self._puzzle_cap(puzzle)

        with self.locks.hold(user_id):
            for attempt_no in range(1, self.SAVE_ATTEMPTS + 1):
                record = self.store.load(user_id)
                outcome = self._apply_guess(record, language, today, canonical_guess,
                                            canonical_answer, cap)
                if outcome.attempt.correct:
                    outcome.solved_answer = puzzle.answer
                try:
                    self.store.save(record)
                    return outcome
                except ConcurrencyConflict:
                    if attempt_no == self.SAVE_ATTEMPTS:
                        raise
                    game_logger.logger.warning(
                        f"Version conflict saving player {user_id}, reloading and retrying"
                    )

    def _apply_guess(self, record: PlayerRecord, language: str, today: str,
                     canonical_guess: str, canonical_answer: str, cap: int) -> GuessOutcome:
        self.daily_lock.check(record, language, today)

        existing = record.peek_language_state(language).attempt_for(today)
        attempt = existing or DailyAttempt(date=today)
        updated = attempt_ledger.apply_guess(
            attempt, canonical_guess, canonical_answer, cap,
            streak=record.peek_global_state().streak,
        )

        state = record.language_state(language)
        state.history[today] = updated
        state.last_played_date = today

        streak_changed = False
        if updated.correct:
            self.daily_lock.record_language_win(state, today)
            streak_changed = self.daily_lock.record_win(record, language, today)

        return GuessOutcome(
            language_name=language,
            attempt=updated,
            language=state,
            global_state=record.peek_global_state(),
            revealed_hint_count=attempt_ledger.revealed_hint_count(updated, cap),
            max_hints=cap,
            streak_changed=streak_changed,
        )

    def reveal_hints(self, user_id: Optional[str], language: str,
                     day: Optional[str] = None) -> HintDisclosure:
        """
        Disclose the hints of a puzzle.

        Today's puzzle discloses as many hints as the player's guesses
        entitle them to (and records the disclosure); past puzzles are shown
        in full with their answer.

        Raises:
            InvalidInput: Bad language, malformed or future date
            AuthenticationError: No user for today's puzzle
            NotFound: No puzzle for the pair
        """
        language = resolve_language(language)
        today = self.today()
        try:
            requested = parse_date(day) if day else today
        except ValueError as e:
            raise InvalidInput(str(e), date=day)
        if requested > today:
            raise InvalidInput("Future puzzles are not available", date=day)

        puzzle = self.puzzles.get_puzzle(language, requested)
        cap = self._puzzle_cap(puzzle)

        if requested < today:
            return HintDisclosure(puzzle=puzzle, hints_revealed=cap,
                                  max_hints=cap, revealed_hint_count=cap, answer=puzzle.answer)

        if not user_id:
            raise AuthenticationError("Sign in to see today's hints")

        date_key = format_date(requested)
        with self.locks.hold(user_id):
            for attempt_no in range(1, self.SAVE_ATTEMPTS + 1):
                record = self.store.load(user_id)
                existing = record.peek_language_state(language).attempt_for(date_key)
                if existing is None:
                    return HintDisclosure(puzzle=puzzle, hints_revealed=1, max_hints=cap,
                                          revealed_hint_count=1)

                updated = attempt_ledger.reveal_hints(existing, cap)
                disclosure = HintDisclosure(
                    puzzle=puzzle,
                    hints_revealed=updated.hints_revealed,
                    max_hints=cap,
                    revealed_hint_count=attempt_ledger.revealed_hint_count(updated, cap),
                    answer=puzzle.answer if updated.correct else None,
                    attempt=updated,
                )
                if updated.hints_revealed == existing.hints_revealed:
                    return disclosure

                record.language_state(language).history[date_key] = updated
                try:
                    self.store.save(record)
                    return disclosure
                except ConcurrencyConflict:
                    if attempt_no == self.SAVE_ATTEMPTS:
                        raise


# Global service instance
_session_service = None


def get_session_service() -> Optional[GameSessionService]:
    """Get the global game session service instance."""
    return _session_service


def initialize_session_service(store, puzzles, **kwargs) -> GameSessionService:
    """Initialize the global game session service instance."""
    global _session_service
    _session_service = GameSessionService(store, puzzles, **kwargs)
    return _session_service
