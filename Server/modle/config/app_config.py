"""
Configuration Management Module

Centralized configuration management following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load environment variables from config.env next to this module
CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))
load_dotenv(os.path.join(CONFIG_DIR, 'config.env'))


class Config:
    """Base configuration class with all settings."""

    # Flask Settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    TESTING = False

    # Server Settings
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Database Settings (no URI -> in-process player store)
    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'modle')

    # Authentication Settings
    JWT_SECRET = os.getenv('JWT_SECRET')
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')

    # Puzzle Content Settings
    PUZZLE_SOURCE = os.getenv('PUZZLE_SOURCE', 'json')  # "json" or "mongo"
    PUZZLE_FILE = os.getenv('PUZZLE_FILE', os.path.join(CONFIG_DIR, 'puzzles.json'))

    # Game Settings
    MAX_HINTS = int(os.getenv('MAX_HINTS', 5))
    LOCK_TIMEOUT_SECONDS = float(os.getenv('LOCK_TIMEOUT_SECONDS', 5))

    # Logging Settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    PUZZLE_SOURCE = os.getenv('PUZZLE_SOURCE', 'mongo')


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    MONGO_URI = None
    JWT_SECRET = 'testing-jwt-secret-with-enough-length'
    PUZZLE_SOURCE = 'json'
    LOCK_TIMEOUT_SECONDS = 1.0


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
