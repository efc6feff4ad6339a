"""
Puzzle Data Models

Contains the immutable daily puzzle definition.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class PuzzleDefinition:
    """A (language, date) keyed answer plus its ordered hints."""
    language: str
    date: str  # YYYY-MM-DD, UTC
    answer: str
    hints: Tuple[str, ...]
    meta: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
