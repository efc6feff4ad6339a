"""
Helper Functions

Contains utility functions used throughout the application: guess
normalization, UTC calendar-date handling and request identity.
"""

import datetime
import re
from typing import Dict, Optional

from flask import has_request_context, request

_NON_ALNUM = re.compile(r'[^A-Z0-9]')


def normalize(raw: Optional[str]) -> str:
    """
    Canonical form of a guess or answer.

    Uppercases, then removes every character that is not an ASCII letter
    or digit. Two titles are the same iff their canonical forms are equal.
    """
    if not raw:
        return ''
    return _NON_ALNUM.sub('', str(raw).upper())


def utc_today() -> datetime.date:
    """Current calendar date on the server clock, in UTC."""
    return datetime.datetime.now(datetime.timezone.utc).date()


def format_date(day: datetime.date) -> str:
    return day.isoformat()


def parse_date(value: str) -> datetime.date:
    """
    Parse a strict YYYY-MM-DD calendar date.

    Raises:
        ValueError: If the value is not a valid ISO calendar date
    """
    if not isinstance(value, str) or not re.fullmatch(r'\d{4}-\d{2}-\d{2}', value):
        raise ValueError(f"Invalid date '{value}'. Use YYYY-MM-DD")
    return datetime.date.fromisoformat(value)


def days_since_epoch(day: datetime.date) -> int:
    return (day - datetime.date(1970, 1, 1)).days


def get_user_identity(request_obj=None) -> Dict[str, Optional[str]]:
    """Extract user identity information from request."""
    if request_obj is None:
        if not has_request_context():
            return {'user_ip': 'system', 'user_id': None}
        request_obj = request

    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'
    user = getattr(request_obj, 'user', None) or {}

    return {
        'user_ip': user_ip,
        'user_id': user.get('id'),
    }
