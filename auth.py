"""
Authentication module - signup, login, logout, HTTP Basic credentials.
Uses Flask-Login and Werkzeug for password hashing.
"""

import logging
from functools import wraps

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import generate_password_hash

from errors import AdminRequired, InvalidPayload
from models import User
from store import get_store

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def admin_required(f):
    """Decorator: require admin role. Stack under @login_required."""
    @wraps(f)
    def decorated_view(*args, **kwargs):
        if not getattr(current_user, 'is_admin', False):
            raise AdminRequired()
        return f(*args, **kwargs)
    return decorated_view


def authenticate(username, password):
    """Return the User for valid credentials, else None."""
    if not username or not password:
        return None
    user = User.from_row(get_store().get_user_by_username(username))
    if user is None or not user.check_password(password):
        return None
    return user


def load_user_from_request(req):
    """
    Flask-Login request loader: resolve an HTTP Basic Authorization
    header. Bad credentials leave the request anonymous.
    """
    auth = req.authorization
    if auth is None or auth.type != 'basic':
        return None
    user = authenticate(auth.username, auth.password)
    if user is None:
        logger.warning("Rejected basic auth for username=%s", auth.username)
    return user


def register_user(username, name, email, password, role='user'):
    """Hash the password and create the user. Returns user ID."""
    password_hash = generate_password_hash(
        password, method=current_app.config['PASSWORD_HASH_METHOD']
    )
    return get_store().create_user(username, name, email, password_hash, role=role)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidPayload('Expected a JSON object.')
    return data


def _text_field(data, field):
    """Missing fields read as ''; present ones must be strings."""
    value = data.get(field, '')
    if not isinstance(value, str):
        raise InvalidPayload(f"'{field}' must be a string.")
    return value


@auth_bp.route('/api/users', methods=['POST'])
def signup():
    """
    Create new user account.
    Validates username/email uniqueness, hashes password.
    """
    data = _json_body()
    username = _text_field(data, 'username').strip()
    name = _text_field(data, 'name').strip() or username
    email = _text_field(data, 'email').strip()
    password = _text_field(data, 'password')

    if not username or not email or not password:
        raise InvalidPayload('username, email and password are required.')
    if len(username) < 3 or len(username) > 20:
        raise InvalidPayload('Username must be 3 to 20 characters.')
    if len(password) < 6:
        raise InvalidPayload('Password must be at least 6 characters.')

    store = get_store()
    if store.get_user_by_username(username):
        raise InvalidPayload('Username already taken.')
    if store.get_user_by_email(email):
        raise InvalidPayload('Email already registered.')

    user_id = register_user(username, name, email, password)
    logger.info("Created user %s (id=%s)", username, user_id)
    user = User.get(user_id)
    return jsonify(user.to_dict()), 201


@auth_bp.route('/api/login', methods=['POST'])
def login():
    """
    Authenticate user.
    Checks password hash, creates session via Flask-Login.
    """
    data = _json_body()
    user = authenticate(_text_field(data, 'username').strip(), _text_field(data, 'password'))
    if user is None:
        return jsonify({'error': 'INVALID_CREDENTIALS', 'message': 'Invalid username or password.'}), 401
    login_user(user, remember=bool(data.get('remember', False)))
    logger.info("User %s logged in", user.username)
    return jsonify(user.to_dict())


@auth_bp.route('/api/logout', methods=['POST'])
@login_required
def logout():
    """Log out current user."""
    logout_user()
    return '', 204
