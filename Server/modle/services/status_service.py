"""
Status Query Service

Read-only projection telling a client whether a language can be played
today. It applies the same rules the Game Session Service enforces, so the
client never offers a guess that is bound to be refused.
"""

import datetime
from typing import Any, Callable, Dict, Optional

from ..config.game_settings import DEFAULT_LANGUAGE, GLOBAL_LANGUAGE, canonical_language
from ..errors import InvalidInput
from ..utils.helpers import format_date, utc_today
from .daily_lock import DailyLockCoordinator, is_streak_active


class StatusQueryService:
    """Builds status reports from stored player records."""

    def __init__(self, store, today: Callable[[], datetime.date] = utc_today,
                 lock: Optional[DailyLockCoordinator] = None):
        self.store = store
        self.today = today
        self.daily_lock = lock or DailyLockCoordinator()

    def get_status(self, user_id: str, language: Optional[str] = None) -> Dict[str, Any]:
        """
        Status of ``language`` (or of the global aggregate) for today.

        Raises:
            InvalidInput: If the language is not recognised
        """
        resolved = canonical_language(language or DEFAULT_LANGUAGE)
        if resolved is None:
            raise InvalidInput(f"Invalid language '{language}'", language=language)

        today = format_date(self.today())
        record = self.store.load(user_id)
        global_state = record.peek_global_state()
        marker = global_state.attempt_for(today)
        global_streak_active = is_streak_active(global_state.last_played_date, today)

        if resolved == GLOBAL_LANGUAGE:
            report = global_state.to_dict()
            report.update({
                'canPlay': marker is None,
                'dailyLimitReached': marker is not None,
                'playedToday': marker is not None,
                'completedToday': marker is not None,
                'lockedBy': self.daily_lock.holder_language(record, today),
                'streakActive': global_streak_active,
            })
            return report

        state = record.peek_language_state(resolved)
        today_attempt = state.attempt_for(today)
        daily_limit_reached = self.daily_lock.is_locked_for(record, resolved, today)
        completed_today = bool(today_attempt and today_attempt.correct)

        return {
            'languageName': resolved,
            'date': today,
            'canPlay': not daily_limit_reached and not completed_today,
            'dailyLimitReached': daily_limit_reached,
            'completedToday': completed_today,
            'playedToday': today_attempt is not None or marker is not None,
            'lockedBy': self.daily_lock.holder_language(record, today),
            'streak': global_state.streak,
            'streakActive': global_streak_active,
            'history': state.to_dict()['history'],
            'today': today_attempt.to_dict() if today_attempt else None,
            'language': state.to_dict(),
            'global': global_state.to_dict(),
            'primaryStreak': global_state.streak,
        }


# Global service instance
_status_service = None


def get_status_service() -> Optional[StatusQueryService]:
    """Get the global status query service instance."""
    return _status_service


def initialize_status_service(store, **kwargs) -> StatusQueryService:
    """Initialize the global status query service instance."""
    global _status_service
    _status_service = StatusQueryService(store, **kwargs)
    return _status_service
