from functools import wraps
from flask import Blueprint, current_app, g, jsonify, request
from flask_jwt_extended import (
    JWTManager, create_access_token, get_jwt, get_jwt_identity,
    set_access_cookies, unset_jwt_cookies, verify_jwt_in_request,
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.security import check_password_hash
from models import db, User
from logging_config import get_logger

auth_bp = Blueprint('auth', __name__)
jwt = JWTManager()
logger = get_logger(__name__)

# ---------------------- Token error responses ----------------------
def _unauthorized(*_args):
    return jsonify({'error': 'Unauthorized'}), 401

jwt.unauthorized_loader(_unauthorized)
jwt.invalid_token_loader(_unauthorized)
jwt.expired_token_loader(_unauthorized)
jwt.revoked_token_loader(_unauthorized)

# ---------------------- Auth Helpers ----------------------
def current_user():
    """The user behind the request's auth cookie, looked up once per request."""
    if 'current_user' not in g:
        identity = get_jwt_identity()
        g.current_user = db.session.get(User, int(identity)) if identity else None
    return g.current_user

def login_required(view_func):
    """Reject the request with 401 unless it carries a valid auth cookie for an existing user.

    The resolved user is passed to the view as the ``user`` keyword argument.
    """
    @wraps(view_func)
    def wrapped(*args, **kwargs):
        verify_jwt_in_request()
        user = current_user()
        if user is None:
            return _unauthorized()
        return view_func(*args, user=user, **kwargs)
    return wrapped

def client_identifier():
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.headers.get('X-Real-IP') or request.remote_addr or 'unknown'

# ---------------------- Routes: Auth ----------------------
@auth_bp.route('/api/login', methods=['POST'])
def login():
    client = client_identifier()
    limiter = current_app.extensions['login_rate_limiter']
    if not limiter.hit(client):
        logger.warning('login_rate_limited', client=client)
        return jsonify({'error': 'Too many login attempts. Please try again later.'}), 429

    data = request.get_json(silent=True) or {}
    username = str(data.get('username') or '').strip()
    password = str(data.get('password') or '')
    user = User.query.filter_by(username=username).first() if username else None
    if not user or not password or not check_password_hash(user.password_hash, password):
        logger.info('login_failed', client=client, username=username)
        return jsonify({'error': 'Invalid credentials'}), 401

    token = create_access_token(identity=str(user.id), additional_claims={'username': user.username})
    resp = jsonify({'success': True, 'message': 'Login successful'})
    set_access_cookies(resp, token, max_age=int(current_app.config['JWT_ACCESS_TOKEN_EXPIRES'].total_seconds()))
    logger.info('login_succeeded', client=client, username=user.username)
    return resp

@auth_bp.route('/api/logout', methods=['POST'])
def logout():
    resp = jsonify({'success': True})
    unset_jwt_cookies(resp)
    return resp

@auth_bp.route('/api/auth/check')
def auth_check():
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return jsonify({'authenticated': False})
    user = current_user()
    if user is None:
        return jsonify({'authenticated': False})
    return jsonify({'authenticated': True, 'user': {'id': user.id, 'username': get_jwt().get('username', user.username)}})
