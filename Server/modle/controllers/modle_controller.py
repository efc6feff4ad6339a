"""
Modle Controller

Handles the daily puzzle HTTP endpoints: status queries and guess submission.
"""

from flask import Blueprint, request, jsonify
from ..errors import ModleError, DailyLimitReached, InvalidInput
from ..services.session_service import get_session_service
from ..services.status_service import get_status_service
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from ..utils.helpers import get_user_identity

modle_bp = Blueprint('modle', __name__)


def _service_unavailable(name):
    return jsonify({
        'success': False,
        'error': f'{name} unavailable'
    }), 500


def _error_response(action, error, language=None):
    """Translate a ModleError into its JSON response and log it."""
    error_response = error.to_dict()
    game_logger.log_server_response(request, action, False, error_response, language,
                                    error_code=error.code)
    return jsonify(error_response), error.status_code


@modle_bp.route('/status', methods=['GET'])
@require_auth
def get_status():
    """Report whether a language (or the global aggregate) can be played today."""
    language = request.args.get('language')
    try:
        status_service = get_status_service()
        if not status_service:
            return _service_unavailable('Status service')

        game_logger.log_user_action(request, 'get_status', language)

        status = status_service.get_status(request.user['id'], language)
        response_data = {'success': True, **status}

        game_logger.log_server_response(
            request, 'get_status', True, response_data, language,
            can_play=status.get('canPlay'), daily_limit_reached=status.get('dailyLimitReached')
        )
        return jsonify(response_data)

    except ModleError as e:
        return _error_response('get_status', e, language)
    except Exception as e:
        game_logger.log_error(request, e, 'get_status', language)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_status', False, error_response, language)
        return jsonify(error_response), 500


@modle_bp.route('/result', methods=['POST'])
@require_auth
def submit_result():
    """Submit a guess for today's puzzle in one language."""
    data = request.get_json(silent=True)
    language = data.get('language') if isinstance(data, dict) else None
    try:
        session_service = get_session_service()
        if not session_service:
            return _service_unavailable('Game session service')

        if not isinstance(data, dict):
            raise InvalidInput('Request body must be a JSON object')
        guess = data.get('guess')
        if not isinstance(guess, str):
            raise InvalidInput('Guess is required', language=language)
        claimed_date = data.get('date')
        if claimed_date is not None and not isinstance(claimed_date, str):
            raise InvalidInput('Date must be a YYYY-MM-DD string', language=language)

        game_logger.log_user_action(request, 'submit_guess', language,
                                    guess_length=len(guess), claimed_date=claimed_date)

        user_id = request.user['id']
        outcome = session_service.submit_guess(user_id, language, guess, claimed_date)
        response_data = outcome.to_dict()

        user_ip = get_user_identity(request)['user_ip']
        attempt = outcome.attempt
        game_logger.log_game_event(
            user_id, 'guess_accepted', user_ip,
            language=outcome.language_name, date=attempt.date,
            guess_number=len(attempt.guesses), correct=attempt.correct
        )
        if attempt.correct:
            game_logger.log_game_event(
                user_id, 'puzzle_solved', user_ip,
                language=outcome.language_name, date=attempt.date,
                guesses_used=len(attempt.guesses), streak=outcome.primary_streak
            )
        if outcome.streak_changed:
            game_logger.log_game_event(
                user_id, 'streak_updated', user_ip,
                language=outcome.language_name, streak=outcome.primary_streak
            )

        game_logger.log_server_response(
            request, 'submit_guess', True, response_data, outcome.language_name,
            correct=attempt.correct, guesses_used=len(attempt.guesses)
        )
        return jsonify(response_data)

    except DailyLimitReached as e:
        game_logger.log_game_event(
            request.user['id'], 'daily_limit_reached', get_user_identity(request)['user_ip'],
            language=language, locked_by=(e.marker or {}).get('language')
        )
        return _error_response('submit_guess', e, language)
    except ModleError as e:
        return _error_response('submit_guess', e, language)
    except Exception as e:
        game_logger.log_error(request, e, 'submit_guess', language)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'submit_guess', False, error_response, language)
        return jsonify(error_response), 500
