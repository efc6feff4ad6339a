"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- game_settings.py: Game rules and constants (business logic)
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .game_settings import (
    SUPPORTED_LANGUAGES, DEFAULT_LANGUAGE, GLOBAL_LANGUAGE, GLOBAL_STATE_KEY, MAX_HINTS,
    canonical_language, max_hints_for, get_language_list
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Game rules
    'SUPPORTED_LANGUAGES', 'DEFAULT_LANGUAGE', 'GLOBAL_LANGUAGE', 'GLOBAL_STATE_KEY', 'MAX_HINTS',
    'canonical_language', 'max_hints_for', 'get_language_list'
]
