"""
Health Controller

Liveness endpoint for load balancers and monitoring.
"""

from flask import Blueprint, jsonify
from ..config import get_language_list
from ..services import get_puzzle_repository
from ..services.auth_service import get_auth_service
from ..services.session_service import get_session_service
from ..services.status_service import get_status_service
from ..utils.game_logger import game_logger

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health():
    services = {
        'auth': get_auth_service() is not None,
        'session': get_session_service() is not None,
        'status': get_status_service() is not None,
        'puzzles': get_puzzle_repository() is not None,
    }
    healthy = all(services.values())
    return jsonify({
        'success': healthy,
        'status': 'ok' if healthy else 'degraded',
        'services': services,
        'languages': get_language_list(),
        'logs': game_logger.get_log_stats()
    }), 200 if healthy else 503
