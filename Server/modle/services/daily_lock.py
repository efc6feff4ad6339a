"""
Daily Lock Coordinator

Enforces one solved puzzle per UTC calendar day across all languages and
maintains the unified streak stored in the player's GlobalState.
"""

import datetime
from typing import Optional

from ..config.game_settings import GLOBAL_STATE_KEY
from ..errors import DailyLimitReached
from ..models.attempt import DailyAttempt, LanguageState, PlayerRecord
from ..utils.helpers import parse_date


def next_streak(previous_date: Optional[str], streak: int, today: str) -> int:
    """
    Streak after a win on ``today``.

    - previous win yesterday: streak + 1
    - previous win today (re-entrant): unchanged
    - gap of two or more days, or no previous win: 1
    """
    if previous_date == today:
        return streak
    if previous_date and parse_date(today) - parse_date(previous_date) == datetime.timedelta(days=1):
        return streak + 1
    return 1


def is_streak_active(last_date: Optional[str], today: str) -> bool:
    """True when the last win was today or yesterday."""
    if not last_date:
        return False
    return (parse_date(today) - parse_date(last_date)).days in (0, 1)


class DailyLockCoordinator:
    """Cross-language daily lock and streak bookkeeping."""

    def lock_holder(self, record: PlayerRecord, today: str) -> Optional[DailyAttempt]:
        """Today's global marker, if any language has been won today."""
        return record.peek_global_state().attempt_for(today)

    def holder_language(self, record: PlayerRecord, today: str) -> Optional[str]:
        """
        Language whose win set today's marker.

        Markers written before the language was recorded carry only
        ``{date, correct}``; the holder is then the language whose own
        attempt for today is won.
        """
        marker = self.lock_holder(record, today)
        if marker is None:
            return None
        if marker.language:
            return marker.language
        for key, state in record.states.items():
            if key == GLOBAL_STATE_KEY:
                continue
            attempt = state.attempt_for(today)
            if attempt is not None and attempt.correct:
                return key
        return None

    def is_locked_for(self, record: PlayerRecord, language: str, today: str) -> bool:
        if self.lock_holder(record, today) is None:
            return False
        return self.holder_language(record, today) != language

    def check(self, record: PlayerRecord, language: str, today: str) -> None:
        """
        Raises:
            DailyLimitReached: Another language already used today's slot
        """
        if self.is_locked_for(record, language, today):
            marker = self.lock_holder(record, today).to_dict()
            marker.setdefault('language', self.holder_language(record, today))
            raise DailyLimitReached(
                "Already played today's Modle! One puzzle per day. Come back tomorrow!",
                marker=marker,
                global_state=record.peek_global_state().to_dict(),
            )

    def record_win(self, record: PlayerRecord, language: str, today: str) -> bool:
        """
        Write today's marker and advance the global streak.

        Returns:
            True if the global state was mutated
        """
        global_state = record.global_state
        if global_state.attempt_for(today) is not None:
            return False

        global_state.history[today] = DailyAttempt.global_marker(today, language)
        global_state.streak = next_streak(global_state.last_played_date, global_state.streak, today)
        global_state.last_played_date = today
        return True

    def record_language_win(self, state: LanguageState, today: str) -> None:
        """Per-language streak, counted over that language's own winning days."""
        state.streak = next_streak(state.last_win_before(today), state.streak, today)
