"""
Game Logger Module for the Modle Server

This module provides structured logging for user actions, server responses,
and game events (guesses, wins, daily lock hits, streak changes).
"""

import logging
import json
import os
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from pathlib import Path

from .helpers import get_user_identity

# Response keys whose content must not end up in the logs
_SECRET_KEYS = ('solvedAnswer', 'answer')


class GameLogger:
    """
    Centralized logging system for the Modle server.

    Features:
    - User action tracking with IP and authenticated user id
    - Server response logging
    - Game event logging
    - JSON structured logs for easy parsing
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = getattr(logging, str(level).upper(), logging.INFO)

        # Setup main game logger
        self.logger = self._setup_logger()

    def _log_file(self) -> Path:
        return self.log_dir / f"game_log_{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.log"

    def _setup_logger(self) -> logging.Logger:
        """Setup the main game logger with file handler."""
        logger = logging.getLogger('modle_game')
        logger.setLevel(self.level)

        # Prevent duplicate handlers
        if logger.handlers:
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()

        # File handler for detailed logs
        file_handler = logging.FileHandler(self._log_file(), encoding='utf-8')
        file_handler.setLevel(self.level)

        # Console handler for only important messages (WARNING and above)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)

        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        return logger

    def _create_log_entry(self,
                          event_type: str,
                          action: str,
                          user_info: Dict[str, Any],
                          details: Dict[str, Any]) -> str:
        """Create a structured log entry."""
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details
        }
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def log_user_action(self,
                        request,
                        action: str,
                        language: Optional[str] = None,
                        **kwargs):
        """
        Log user actions with full context.

        Args:
            request: Flask request object
            action: Type of action (e.g., 'submit_guess', 'get_status')
            language: Puzzle language if applicable
            **kwargs: Additional details to log
        """
        details = {
            'language': language,
            'endpoint': request.endpoint,
            'method': request.method,
            'url': request.url,
            **kwargs
        }

        log_message = self._create_log_entry('USER_ACTION', action, get_user_identity(request), details)
        self.logger.info(log_message)

    def log_server_response(self,
                            request,
                            action: str,
                            success: bool,
                            response_data: Dict[str, Any],
                            language: Optional[str] = None,
                            **kwargs):
        """
        Log server responses with full context.

        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client
            language: Puzzle language if applicable
            **kwargs: Additional details to log
        """
        details = {
            'language': language,
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': self._sanitize_response_data(response_data),
            **kwargs
        }

        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        log_message = self._create_log_entry(event_type, action, get_user_identity(request), details)

        if success:
            self.logger.info(log_message)
        else:
            self.logger.error(log_message)

    def log_game_event(self,
                       user_id: Optional[str],
                       event: str,
                       user_ip: str,
                       **kwargs):
        """
        Log game-specific events (solves, daily lock hits, streak changes).

        Args:
            user_id: Player the event belongs to
            event: Type of game event (e.g., 'puzzle_solved', 'streak_updated')
            user_ip: User's IP address
            **kwargs: Additional game details
        """
        user_info = {'user_ip': user_ip, 'user_id': user_id}

        log_message = self._create_log_entry('GAME_EVENT', event, user_info, dict(kwargs))
        self.logger.info(log_message)

    def log_error(self,
                  request,
                  error: Exception,
                  action: str,
                  language: Optional[str] = None):
        """
        Log errors with full context.

        Args:
            request: Flask request object
            error: Exception that occurred
            action: Action that was being performed
            language: Puzzle language if applicable
        """
        details = {
            'language': language,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }

        log_message = self._create_log_entry('ERROR', action, get_user_identity(request), details)
        self.logger.error(log_message)

    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Remove or mask sensitive data from response logs."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = data.copy()

        for key in _SECRET_KEYS:
            if sanitized.get(key):
                sanitized[key] = '***'

        if isinstance(sanitized.get('hints'), list):
            sanitized['hints'] = len(sanitized['hints'])

        # Histories grow without bound; keep only their size
        for key in ('language', 'global'):
            state = sanitized.get(key)
            if isinstance(state, dict) and 'history' in state:
                sanitized[key] = {
                    'lastPlayedDate': state.get('lastPlayedDate'),
                    'streak': state.get('streak'),
                    'history_days': len(state.get('history') or {}),
                }
        if isinstance(sanitized.get('history'), dict):
            sanitized['history'] = len(sanitized['history'])

        # Guesses include the winning title; keep only their count
        for key in ('attempt', 'today'):
            attempt = sanitized.get(key)
            if isinstance(attempt, dict):
                sanitized[key] = {
                    'date': attempt.get('date'),
                    'guesses': len(attempt.get('guesses') or []),
                    'correct': attempt.get('correct'),
                    'hintsRevealed': attempt.get('hintsRevealed'),
                }

        # Catalogue management responses
        if isinstance(sanitized.get('puzzle'), dict):
            puzzle = sanitized['puzzle']
            sanitized['puzzle'] = {'id': puzzle.get('id'), 'language': puzzle.get('language'),
                                   'index': puzzle.get('index')}
        if isinstance(sanitized.get('puzzles'), list):
            sanitized['puzzles'] = len(sanitized['puzzles'])

        return sanitized

    def get_log_stats(self) -> Dict[str, Any]:
        """
        Summarize today's log file for the health endpoint.

        Entries are counted by event type, and game events by action
        (e.g. how many puzzles were solved today).
        """
        log_file = self._log_file()
        if not log_file.exists():
            return {'error': 'No log file found for today'}

        by_type: Counter = Counter()
        game_events: Counter = Counter()
        unparsed = 0

        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    # asctime | level | json
                    _, _, payload = line.rstrip('\n').partition(' | ')
                    _, _, payload = payload.partition(' | ')
                    if not payload:
                        continue
                    try:
                        entry = json.loads(payload)
                    except ValueError:
                        unparsed += 1
                        continue
                    by_type[entry.get('event_type', 'UNKNOWN')] += 1
                    if entry.get('event_type') == 'GAME_EVENT':
                        game_events[entry.get('action')] += 1
        except OSError as e:
            return {'error': f'Failed to get stats: {str(e)}'}

        return {
            'log_file': str(log_file),
            'file_size_mb': round(log_file.stat().st_size / (1024 * 1024), 2),
            'total_entries': sum(by_type.values()) + unparsed,
            'by_event_type': dict(by_type),
            'game_events': dict(game_events),
            'unparsed': unparsed,
        }


# Global logger instance
game_logger = GameLogger(
    log_dir=os.getenv('LOG_DIR', 'logs'),
    level=os.getenv('LOG_LEVEL', 'INFO')
)
