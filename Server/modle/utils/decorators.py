"""
Authentication Decorators

Contains decorators for HTTP authentication.
"""

from functools import wraps
from flask import request, jsonify

from ..errors import AuthenticationError, Forbidden


def _bearer_token():
    auth_header = request.headers.get('Authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        return None
    return auth_header.split(' ', 1)[1].strip()


def _unauthorized(message):
    error = AuthenticationError(message)
    return jsonify(error.to_dict()), error.status_code


def require_auth(f):
    """
    Decorator to require authentication for protected HTTP endpoints.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from ..services.auth_service import get_auth_service

        auth_service = get_auth_service()
        if not auth_service:
            return jsonify({
                'success': False,
                'error': 'Authentication service unavailable'
            }), 500

        token = _bearer_token()
        if not token:
            return _unauthorized('Authorization token required')

        result = auth_service.verify_token(token)
        if not result['success']:
            return _unauthorized(result['error'])

        # Add user data to request context
        request.user = result['user']
        return f(*args, **kwargs)

    return decorated_function


def optional_auth(f):
    """
    Decorator that attaches the user when a valid token is sent.

    A missing token is allowed; an invalid one is still rejected.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from ..services.auth_service import get_auth_service

        request.user = None
        token = _bearer_token()
        if token:
            auth_service = get_auth_service()
            if not auth_service:
                return jsonify({
                    'success': False,
                    'error': 'Authentication service unavailable'
                }), 500
            result = auth_service.verify_token(token)
            if not result['success']:
                return _unauthorized(result['error'])
            request.user = result['user']
        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """
    Decorator for catalogue management endpoints.

    Requires a valid token (see require_auth) whose ``isAdmin`` claim is
    set, or whose ``role`` claim is ``admin``.
    """
    @wraps(f)
    def admin_only(*args, **kwargs):
        if not request.user.get('isAdmin'):
            error = Forbidden('Access denied. Admin privileges required.')
            return jsonify(error.to_dict()), error.status_code
        return f(*args, **kwargs)

    return require_auth(admin_only)
