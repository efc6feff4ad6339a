"""
Game Configuration Constants Module

Rules shared by every Modle component: the supported puzzle languages,
the reserved state keys and the hint cap.
"""

from typing import Final, List, Optional, Tuple

# Puzzle languages, in display order
SUPPORTED_LANGUAGES: Final[Tuple[str, ...]] = (
    "English",
    "Hindi",
    "Tamil",
    "Telugu",
    "Kannada",
    "Malayalam",
)

DEFAULT_LANGUAGE: Final[str] = "English"

GLOBAL_LANGUAGE: Final[str] = "global"
"""
Reserved query value for the cross-language aggregate. Never playable.
"""

GLOBAL_STATE_KEY: Final[str] = "_global"
"""
Key of the GlobalState entry inside a player's modle map.
"""

MAX_HINTS: Final[int] = 5
"""
Upper bound on hints disclosed per puzzle. A puzzle with fewer hints caps lower.
"""


def canonical_language(value: Optional[str]) -> Optional[str]:
    """
    Map a client-supplied language name to its canonical spelling.

    Matching is case-insensitive and ignores surrounding whitespace.

    Returns:
        The canonical language name, GLOBAL_LANGUAGE for the aggregate,
        or None when the value is not recognised.
    """
    if not value or not isinstance(value, str):
        return None
    wanted = value.strip().lower()
    if wanted == GLOBAL_LANGUAGE:
        return GLOBAL_LANGUAGE
    for language in SUPPORTED_LANGUAGES:
        if language.lower() == wanted:
            return language
    return None


def max_hints_for(hint_count: int, cap: int = MAX_HINTS) -> int:
    """Number of hints that can ever be disclosed for a puzzle."""
    return max(1, min(cap, hint_count))


def get_language_list() -> List[str]:
    """Supported languages as a plain list (for JSON responses)."""
    return list(SUPPORTED_LANGUAGES)
