"""
Player State Data Models

Contains the per-user Modle aggregate: one DailyAttempt per
(language, date), one LanguageState per language, and the GlobalState
stored under the reserved "_global" key. Field names on the wire follow
the client contract (camelCase).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config.game_settings import GLOBAL_STATE_KEY


class AttemptStatus(Enum):
    """Lifecycle of one attempt."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    WON = "WON"


@dataclass
class DailyAttempt:
    """One user's guesses against one puzzle."""
    date: str
    guesses: List[str] = field(default_factory=list)
    guesses_status: List[bool] = field(default_factory=list)
    correct: bool = False
    hints_revealed: int = 1
    language: Optional[str] = None  # set only on global marker entries

    @property
    def status(self) -> AttemptStatus:
        if self.correct:
            return AttemptStatus.WON
        if self.guesses:
            return AttemptStatus.IN_PROGRESS
        return AttemptStatus.NOT_STARTED

    @property
    def is_terminal(self) -> bool:
        return self.correct

    def copy(self) -> 'DailyAttempt':
        return DailyAttempt(
            date=self.date,
            guesses=list(self.guesses),
            guesses_status=list(self.guesses_status),
            correct=self.correct,
            hints_revealed=self.hints_revealed,
            language=self.language,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'date': self.date,
            'guesses': list(self.guesses),
            'guessesStatus': list(self.guesses_status),
            'correct': self.correct,
            'hintsRevealed': self.hints_revealed,
        }
        if self.language is not None:
            data['language'] = self.language
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], date: Optional[str] = None) -> 'DailyAttempt':
        guesses = list(data.get('guesses') or [])
        status = [bool(s) for s in (data.get('guessesStatus') or [])]
        # Documents written before guessesStatus existed only carry guesses
        if len(status) != len(guesses):
            status = (status + [False] * len(guesses))[:len(guesses)]
        return cls(
            date=data.get('date') or date,
            guesses=guesses,
            guesses_status=status,
            correct=bool(data.get('correct', any(status))),
            hints_revealed=max(1, int(data.get('hintsRevealed', 1))),
            language=data.get('language'),
        )

    @classmethod
    def global_marker(cls, date: str, language: str) -> 'DailyAttempt':
        """Entry written into GlobalState.history on the day's first win."""
        return cls(date=date, correct=True, language=language)


@dataclass
class LanguageState:
    """Per-language (or global) streak and attempt history."""
    last_played_date: Optional[str] = None
    streak: int = 0
    history: Dict[str, DailyAttempt] = field(default_factory=dict)

    def attempt_for(self, date: str) -> Optional[DailyAttempt]:
        return self.history.get(date)

    def last_win_before(self, date: str) -> Optional[str]:
        """Most recent winning date strictly before ``date``."""
        wins = [d for d, attempt in self.history.items() if attempt.correct and d < date]
        return max(wins) if wins else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lastPlayedDate': self.last_played_date,
            'streak': self.streak,
            'history': {d: attempt.to_dict() for d, attempt in sorted(self.history.items())},
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'LanguageState':
        if not data:
            return cls()
        history = {
            d: DailyAttempt.from_dict(entry or {}, date=d)
            for d, entry in (data.get('history') or {}).items()
        }
        return cls(
            last_played_date=data.get('lastPlayedDate', data.get('lastPlayed')),
            streak=max(0, int(data.get('streak') or 0)),
            history=history,
        )


@dataclass
class PlayerRecord:
    """
    Per-user aggregate persisted as one document.

    ``version`` is the optimistic concurrency token: 0 means the record has
    never been stored.
    """
    user_id: str
    version: int = 0
    states: Dict[str, LanguageState] = field(default_factory=dict)

    @property
    def global_state(self) -> LanguageState:
        return self.states.setdefault(GLOBAL_STATE_KEY, LanguageState())

    def language_state(self, language: str) -> LanguageState:
        """Language state, created lazily on first access."""
        return self.states.setdefault(language, LanguageState())

    def peek_language_state(self, language: str) -> LanguageState:
        """Language state without creating an entry in the record."""
        return self.states.get(language) or LanguageState()

    def peek_global_state(self) -> LanguageState:
        return self.states.get(GLOBAL_STATE_KEY) or LanguageState()

    def modle_document(self) -> Dict[str, Any]:
        return {key: state.to_dict() for key, state in self.states.items()}

    def to_document(self) -> Dict[str, Any]:
        return {
            '_id': self.user_id,
            'version': self.version,
            'modle': self.modle_document(),
        }

    @classmethod
    def from_document(cls, user_id: str, doc: Optional[Dict[str, Any]]) -> 'PlayerRecord':
        if not doc:
            return cls(user_id=user_id)
        states = {
            key: LanguageState.from_dict(value)
            for key, value in (doc.get('modle') or {}).items()
        }
        return cls(user_id=user_id, version=int(doc.get('version', 0)), states=states)
