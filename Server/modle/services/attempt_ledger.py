"""
Attempt Ledger

Hint-gating state machine for one (user, language, date) attempt:
NOT_STARTED -> IN_PROGRESS -> WON. A player may submit one guess per
disclosed hint until every hint is shown; after that guesses are
unlimited. There is no loss state.
"""

from ..errors import AlreadyCompleted, GuessNotAccepted
from ..models.attempt import DailyAttempt


def revealed_hint_count(attempt: DailyAttempt, max_hints: int) -> int:
    """Hints the player is entitled to see: min(max_hints, guesses + 1), floor 1."""
    return max(1, min(max_hints, len(attempt.guesses) + 1))


def disclosed_hint_count(attempt: DailyAttempt, max_hints: int) -> int:
    """Hints actually disclosed so far, clamped to the puzzle's cap."""
    return max(1, min(max_hints, attempt.hints_revealed))


def can_accept_guess(attempt: DailyAttempt, max_hints: int) -> bool:
    if attempt.is_terminal:
        return False
    disclosed = disclosed_hint_count(attempt, max_hints)
    return disclosed == max_hints or len(attempt.guesses) < disclosed


def reveal_hints(attempt: DailyAttempt, max_hints: int) -> DailyAttempt:
    """
    Disclose every hint the attempt is entitled to.

    Returns:
        A copy with hints_revealed advanced; never moves backwards.
    """
    updated = attempt.copy()
    updated.hints_revealed = max(
        disclosed_hint_count(attempt, max_hints),
        revealed_hint_count(attempt, max_hints),
    )
    return updated


def apply_guess(attempt: DailyAttempt, canonical_guess: str, canonical_answer: str,
                max_hints: int, streak: int = 0) -> DailyAttempt:
    """
    Record a guess against the attempt.

    Args:
        attempt: Current attempt (left untouched)
        canonical_guess: Normalized guess text
        canonical_answer: Normalized answer
        max_hints: Hint cap for this puzzle
        streak: Current streak, reported back on AlreadyCompleted

    Returns:
        The updated attempt

    Raises:
        AlreadyCompleted: The attempt is already won
        GuessNotAccepted: Gating violated or the guess was already tried
    """
    if attempt.is_terminal:
        raise AlreadyCompleted("Already solved today's puzzle", attempt=attempt, streak=streak)

    if canonical_guess in attempt.guesses:
        raise GuessNotAccepted("You already tried that title", attempt=attempt)

    if not can_accept_guess(attempt, max_hints):
        raise GuessNotAccepted("Reveal the next hint before guessing again", attempt=attempt)

    updated = attempt.copy()
    is_correct = canonical_guess == canonical_answer
    updated.guesses.append(canonical_guess)
    updated.guesses_status.append(is_correct)
    if is_correct:
        updated.correct = True
    return updated
