"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .decorators import require_auth, optional_auth
from .helpers import get_user_identity, normalize, utc_today, parse_date, format_date
from .game_logger import game_logger

__all__ = [
    'require_auth', 'optional_auth', 'get_user_identity',
    'normalize', 'utc_today', 'parse_date', 'format_date', 'game_logger'
]
