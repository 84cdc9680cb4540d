"""
WebPoint - Authentication Routes
Admin login and token management
"""
from flask import Blueprint, request, jsonify, current_app
from functools import wraps
from datetime import datetime
import logging
import jwt

from webpoint.database import db
from webpoint.models.db_models import DBAdminUser

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def get_admin_by_username(username: str):
    if not username:
        return None
    return DBAdminUser.query.filter_by(username=username.strip().lower()).first()


def verify_credentials(username: str, password: str) -> bool:
    """True only for a known username with the matching password"""
    admin = get_admin_by_username(username)
    return bool(admin and admin.verify_password(password))


def create_admin_user(username: str, password: str) -> DBAdminUser:
    """Create and persist an admin account"""
    admin = DBAdminUser(username=username, password=password)
    db.session.add(admin)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return admin


def token_required(f):
    """Decorator to require valid JWT token"""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None

        # Check header
        if 'Authorization' in request.headers:
            auth_header = request.headers['Authorization']
            if auth_header.startswith('Bearer '):
                token = auth_header.split(' ')[1]

        if not token:
            return jsonify({'error': 'Token is missing'}), 401

        try:
            payload = jwt.decode(
                token,
                current_app.config['JWT_SECRET_KEY'],
                algorithms=['HS256']
            )
            current_user = db.session.get(DBAdminUser, payload['user_id'])
            if not current_user:
                return jsonify({'error': 'User not found'}), 401
        except jwt.ExpiredSignatureError:
            return jsonify({'error': 'Token has expired'}), 401
        except (jwt.InvalidTokenError, KeyError):
            return jsonify({'error': 'Invalid token'}), 401

        return f(current_user, *args, **kwargs)

    return decorated


def generate_token(user: DBAdminUser) -> str:
    """Generate JWT token for an admin"""
    payload = {
        'user_id': user.id,
        'username': user.username,
        'exp': datetime.utcnow() + current_app.config['JWT_ACCESS_TOKEN_EXPIRES']
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm='HS256'
    )


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Admin login

    POST /api/auth/login
    {
        "username": "admin",
        "password": "password123"
    }
    """
    data = request.get_json(silent=True) or {}

    if not data.get('username') or not data.get('password'):
        return jsonify({'error': 'Username and password required'}), 400

    if not verify_credentials(data['username'], data['password']):
        logger.warning(f"Failed admin login for {data['username']!r}")
        return jsonify({'error': 'Invalid username or password'}), 401

    user = get_admin_by_username(data['username'])
    user.last_login = datetime.utcnow()
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to record last login for {user.username}: {e}")

    return jsonify({
        'token': generate_token(user),
        'user': user.to_dict()
    })


@auth_bp.route('/me', methods=['GET'])
@token_required
def get_current_user(current_user):
    """Get current admin info"""
    return jsonify(current_user.to_dict())


@auth_bp.route('/refresh', methods=['POST'])
@token_required
def refresh_token(current_user):
    """Get a new token"""
    return jsonify({'token': generate_token(current_user)})
