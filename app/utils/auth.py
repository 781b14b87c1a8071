"""Shared authentication utilities.

JWT decorator used by the promotion routes. Tokens are HS256 signed with
the app's JWT_SECRET_KEY and carry a `user_id` claim.
"""

from functools import wraps
from flask import request, jsonify, current_app, g
import jwt


def token_required(f):
    """
    Decorator to require valid JWT token, setting g.current_user.

    Sets g.current_user to the full User object for use in the route.

    Usage:
        @app.route('/protected')
        @token_required
        def protected_route():
            user = g.current_user
            return jsonify({'user_id': user.id})
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        # Import here to avoid circular imports
        from app.models import User

        auth_header = request.headers.get('Authorization')

        if not auth_header or not auth_header.startswith('Bearer '):
            return jsonify({'error': 'Token is missing'}), 401

        try:
            token = auth_header.split(' ')[1]
            payload = jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=['HS256'])
            current_user = User.query.get(payload['user_id'])
            if not current_user:
                return jsonify({'error': 'User not found'}), 401
            g.current_user = current_user
        except jwt.ExpiredSignatureError:
            return jsonify({'error': 'Token has expired'}), 401
        except (jwt.InvalidTokenError, KeyError):
            return jsonify({'error': 'Invalid token'}), 401

        return f(*args, **kwargs)
    return decorated
