"""
Modle Errors

Exception hierarchy raised by the services and translated into JSON
responses by the controllers. Every error is per-request; none is fatal
to the server process.
"""

from typing import Any, Dict, Optional


class ModleError(Exception):
    """Base class for all Modle service errors."""

    status_code = 400
    code = 'modle_error'
    retryable = False

    def __init__(self, message: str, **payload: Any):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation used by the HTTP layer."""
        body = {
            'success': False,
            'error': self.code,
            'msg': self.message,
            'dailyLimitReached': False,
            'alreadyCompleted': False,
            'retryable': self.retryable,
        }
        body.update(self.payload)
        return body


class InvalidInput(ModleError):
    """Malformed language, empty guess, bad or disallowed date."""

    status_code = 400
    code = 'invalid_input'


class AuthenticationError(ModleError):
    """Missing, expired or invalid identity token."""

    status_code = 401
    code = 'unauthorized'


class NotFound(ModleError):
    """No puzzle for the requested (language, date), or no puzzle with that id."""

    status_code = 404
    code = 'not_found'


class Forbidden(ModleError):
    """Authenticated, but without the admin privileges the endpoint needs."""

    status_code = 403
    code = 'forbidden'


class CatalogueReadOnly(ModleError):
    """Puzzle edits requested while the catalogue is served from JSON."""

    status_code = 409
    code = 'catalogue_read_only'


class DailyLimitReached(ModleError):
    """Today's cross-language slot was already consumed by another language."""

    status_code = 409
    code = 'daily_limit_reached'

    def __init__(self, message: str, marker: Optional[Dict[str, Any]] = None,
                 global_state: Optional[Dict[str, Any]] = None):
        super().__init__(message, lockedBy=(marker or {}).get('language'),
                         marker=marker, **{'global': global_state})
        self.marker = marker
        self.global_state = global_state

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body['dailyLimitReached'] = True
        return body


class GuessNotAccepted(ModleError):
    """Hint gating violated or duplicate guess; the attempt is unchanged."""

    status_code = 409
    code = 'guess_not_accepted'

    def __init__(self, message: str, attempt=None, **payload: Any):
        super().__init__(message, **payload)
        self.attempt = attempt

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.attempt is not None:
            body['attempt'] = self.attempt.to_dict()
        return body


class AlreadyCompleted(GuessNotAccepted):
    """The attempt is already won; the existing terminal state is returned."""

    code = 'already_completed'

    def __init__(self, message: str, attempt=None, streak: int = 0):
        super().__init__(message, attempt=attempt, primaryStreak=streak)
        self.streak = streak

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body['alreadyCompleted'] = True
        return body


class ConcurrencyConflict(ModleError):
    """Per-user lock timeout or stale record version. Safe to retry."""

    status_code = 503
    code = 'concurrency_conflict'
    retryable = True
