"""
Puzzle Controller

Handles hint disclosure for the daily puzzles, catalogue statistics and
admin management of the puzzle catalogue.
"""

from flask import Blueprint, request, jsonify
from ..errors import InvalidInput, ModleError
from ..services import get_puzzle_repository
from ..services.session_service import get_session_service, resolve_language
from ..utils.decorators import optional_auth, require_admin
from ..utils.game_logger import game_logger

puzzle_bp = Blueprint('puzzles', __name__)


@puzzle_bp.route('/daily', methods=['GET'])
@optional_auth
def get_daily_puzzle():
    """Disclose the hints a player may see for a puzzle (today by default)."""
    language = request.args.get('language')
    day = request.args.get('date')
    try:
        session_service = get_session_service()
        if not session_service:
            return jsonify({
                'success': False,
                'error': 'Game session service unavailable'
            }), 500

        game_logger.log_user_action(request, 'get_daily_puzzle', language, date=day)

        user_id = request.user['id'] if request.user else None
        disclosure = session_service.reveal_hints(user_id, language, day)
        response_data = disclosure.to_dict()

        game_logger.log_server_response(
            request, 'get_daily_puzzle', True, response_data, disclosure.puzzle.language,
            hints_revealed=disclosure.hints_revealed
        )
        return jsonify(response_data)

    except ModleError as e:
        error_response = e.to_dict()
        game_logger.log_server_response(request, 'get_daily_puzzle', False, error_response,
                                        language, error_code=e.code)
        return jsonify(error_response), e.status_code
    except Exception as e:
        game_logger.log_error(request, e, 'get_daily_puzzle', language)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_daily_puzzle', False, error_response, language)
        return jsonify(error_response), 500


@puzzle_bp.route('/stats', methods=['GET'])
def get_puzzle_stats():
    """Number of puzzles in the catalogue, per language."""
    try:
        repository = get_puzzle_repository()
        if not repository:
            return jsonify({
                'success': False,
                'error': 'Puzzle repository unavailable'
            }), 500

        response_data = {'success': True, **repository.stats()}
        game_logger.log_server_response(request, 'get_puzzle_stats', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_puzzle_stats')
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


def _catalogue_call(action, operation, language=None, status=200):
    """Run an admin catalogue operation and translate its errors."""
    try:
        repository = get_puzzle_repository()
        if not repository:
            return jsonify({
                'success': False,
                'error': 'Puzzle repository unavailable'
            }), 500

        game_logger.log_user_action(request, action, language)
        try:
            response_data = {'success': True, **operation(repository)}
        except ValueError as e:
            raise InvalidInput(str(e))

        game_logger.log_server_response(request, action, True, response_data, language)
        return jsonify(response_data), status

    except ModleError as e:
        error_response = e.to_dict()
        game_logger.log_server_response(request, action, False, error_response,
                                        language, error_code=e.code)
        return jsonify(error_response), e.status_code
    except Exception as e:
        game_logger.log_error(request, e, action, language)
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")
    if data.get('answer') is not None and not isinstance(data['answer'], str):
        raise InvalidInput("Answer must be a string")
    hints = data.get('hints')
    if hints is not None and (not isinstance(hints, list) or not all(isinstance(h, str) for h in hints)):
        raise InvalidInput("Hints must be a list of strings")
    if data.get('meta') is not None and not isinstance(data['meta'], dict):
        raise InvalidInput("Meta must be an object")
    return data


@puzzle_bp.route('', methods=['GET'])
@require_admin
def list_puzzles():
    """Every puzzle of one language, in rotation order."""
    def operation(repository):
        language = resolve_language(request.args.get('language', 'English'))
        puzzles = repository.list_puzzles(language)
        return {'language': language, 'count': len(puzzles), 'puzzles': puzzles}

    return _catalogue_call('list_puzzles', operation, request.args.get('language'))


@puzzle_bp.route('', methods=['POST'])
@require_admin
def create_puzzle():
    """Append a puzzle to the end of a language's rotation."""
    def operation(repository):
        data = _json_body()
        if not data.get('answer') or not data.get('hints') or not data.get('language'):
            raise InvalidInput("Answer, hints, and language are required")
        language = resolve_language(data['language'])
        return {'puzzle': repository.add_puzzle(language, data['answer'], data['hints'], data.get('meta'))}

    return _catalogue_call('create_puzzle', operation, status=201)


@puzzle_bp.route('/<puzzle_id>', methods=['PUT'])
@require_admin
def update_puzzle(puzzle_id):
    """Edit a puzzle's answer, hints or meta. Days already served are unaffected."""
    def operation(repository):
        data = _json_body()
        return {'puzzle': repository.update_puzzle(
            puzzle_id, answer=data.get('answer'), hints=data.get('hints'), meta=data.get('meta')
        )}

    return _catalogue_call('update_puzzle', operation)


@puzzle_bp.route('/<puzzle_id>', methods=['DELETE'])
@require_admin
def delete_puzzle(puzzle_id):
    """Remove a puzzle from the rotation. Days already served are unaffected."""
    def operation(repository):
        repository.delete_puzzle(puzzle_id)
        return {'id': puzzle_id, 'msg': 'Puzzle deleted successfully'}

    return _catalogue_call('delete_puzzle', operation)
