"""
Tests for the cross-language daily lock and the streak law
"""

import pytest

from modle.config import GLOBAL_STATE_KEY
from modle.errors import DailyLimitReached
from modle.models.attempt import DailyAttempt, LanguageState, PlayerRecord
from modle.services.daily_lock import DailyLockCoordinator, is_streak_active, next_streak


class TestNextStreak:

    def test_first_win(self):
        assert next_streak(None, 0, "2024-05-01") == 1

    def test_consecutive_day(self):
        assert next_streak("2024-05-01", 1, "2024-05-02") == 2

    def test_month_boundary(self):
        assert next_streak("2024-04-30", 6, "2024-05-01") == 7

    def test_gap_resets(self):
        assert next_streak("2024-05-01", 9, "2024-05-03") == 1

    def test_same_day_unchanged(self):
        assert next_streak("2024-05-01", 3, "2024-05-01") == 3


class TestStreakActive:

    @pytest.mark.parametrize("last, today, expected", [
        (None, "2024-05-01", False),
        ("2024-05-01", "2024-05-01", True),
        ("2024-04-30", "2024-05-01", True),
        ("2024-04-29", "2024-05-01", False),
    ])
    def test_window(self, last, today, expected):
        assert is_streak_active(last, today) is expected


class TestDailyLockCoordinator:

    def setup_method(self):
        self.lock = DailyLockCoordinator()
        self.record = PlayerRecord(user_id="user-1")

    def test_unlocked_for_new_player(self):
        self.lock.check(self.record, "English", "2024-05-01")
        assert self.lock.lock_holder(self.record, "2024-05-01") is None
        # Checking must not create state
        assert self.record.states == {}

    def test_win_writes_marker_and_streak(self):
        assert self.lock.record_win(self.record, "English", "2024-05-01") is True

        global_state = self.record.states[GLOBAL_STATE_KEY]
        marker = global_state.history["2024-05-01"]
        assert marker.correct is True
        assert marker.language == "English"
        assert global_state.streak == 1
        assert global_state.last_played_date == "2024-05-01"

    def test_other_language_locked_out(self):
        self.lock.record_win(self.record, "English", "2024-05-01")

        assert self.lock.is_locked_for(self.record, "English", "2024-05-01") is False
        with pytest.raises(DailyLimitReached) as excinfo:
            self.lock.check(self.record, "Hindi", "2024-05-01")

        body = excinfo.value.to_dict()
        assert body["dailyLimitReached"] is True
        assert body["lockedBy"] == "English"
        assert body["global"]["streak"] == 1
        assert body["marker"]["language"] == "English"

    def test_lock_expires_next_day(self):
        self.lock.record_win(self.record, "English", "2024-05-01")
        self.lock.check(self.record, "Hindi", "2024-05-02")

    def test_second_win_same_day_is_noop(self):
        self.lock.record_win(self.record, "English", "2024-05-01")
        assert self.lock.record_win(self.record, "English", "2024-05-01") is False
        assert self.record.global_state.streak == 1

    def test_streak_law_over_days(self):
        self.lock.record_win(self.record, "English", "2024-05-01")
        self.lock.record_win(self.record, "Tamil", "2024-05-02")
        assert self.record.global_state.streak == 2

        # No decay while not playing
        assert self.record.global_state.streak == 2

        self.lock.record_win(self.record, "Hindi", "2024-05-06")
        assert self.record.global_state.streak == 1
        assert self.record.global_state.last_played_date == "2024-05-06"

    def test_language_streak_uses_that_languages_wins(self):
        state = LanguageState()
        state.history["2024-05-01"] = DailyAttempt(date="2024-05-01", guesses=["X"],
                                                   guesses_status=[True], correct=True)
        self.lock.record_language_win(state, "2024-05-01")
        assert state.streak == 1

        # A lost day in between is still played, not won
        state.history["2024-05-02"] = DailyAttempt(date="2024-05-02", guesses=["Y"], guesses_status=[False])
        state.history["2024-05-03"] = DailyAttempt(date="2024-05-03", guesses=["Z"],
                                                   guesses_status=[True], correct=True)
        self.lock.record_language_win(state, "2024-05-03")
        assert state.streak == 1

        state.history["2024-05-04"] = DailyAttempt(date="2024-05-04", guesses=["Z"],
                                                   guesses_status=[True], correct=True)
        self.lock.record_language_win(state, "2024-05-04")
        assert state.streak == 2


class TestLegacyMarker:
    """Markers stored without the winning language."""

    def setup_method(self):
        from conftest import legacy_player_document

        self.lock = DailyLockCoordinator()
        self.record = PlayerRecord.from_document("user-1", legacy_player_document())

    def test_marker_has_no_language(self):
        assert self.lock.lock_holder(self.record, "2024-05-01").language is None

    def test_holder_found_from_winning_language(self):
        assert self.lock.holder_language(self.record, "2024-05-01") == "English"

    def test_winning_language_not_locked(self):
        assert self.lock.is_locked_for(self.record, "English", "2024-05-01") is False
        self.lock.check(self.record, "English", "2024-05-01")

    def test_other_language_locked_with_holder_named(self):
        with pytest.raises(DailyLimitReached) as excinfo:
            self.lock.check(self.record, "Tamil", "2024-05-01")
        assert excinfo.value.to_dict()["lockedBy"] == "English"

    def test_unknown_holder_locks_every_language(self):
        del self.record.states["English"]
        assert self.lock.holder_language(self.record, "2024-05-01") is None
        assert self.lock.is_locked_for(self.record, "English", "2024-05-01") is True
