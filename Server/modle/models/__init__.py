"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .attempt import AttemptStatus, DailyAttempt, LanguageState, PlayerRecord
from .puzzle import PuzzleDefinition

__all__ = ['AttemptStatus', 'DailyAttempt', 'LanguageState', 'PlayerRecord', 'PuzzleDefinition']
