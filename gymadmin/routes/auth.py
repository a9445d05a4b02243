from flask import Blueprint, current_app, g, jsonify, request

from gymadmin.models.user import User
from gymadmin.utils.decorators import login_required
from gymadmin.utils.errors import ConflictError, UnauthorizedError
from gymadmin.utils.tokens import create_access_token
from gymadmin.utils.validators import validate_login, validate_registration

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an admin account and return it with a fresh token"""
    data = validate_registration(request.get_json(silent=True))

    if User.get_by_email(data['email']):
        raise ConflictError('User with this email already exists')

    user = User(email=data['email'], name=data['name'])
    user.set_password(data['password'])
    user.save()
    user = User.get_by_id(user.id)
    current_app.logger.info("Registered user %s", user.email)

    return jsonify({
        'success': True,
        'message': 'User registered successfully',
        'data': {'user': user.to_dict(), 'token': create_access_token(user)},
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = validate_login(request.get_json(silent=True))

    user = User.authenticate(data['email'], data['password'])
    if not user:
        current_app.logger.info("Failed login for %s from %s", data['email'], request.remote_addr)
        raise UnauthorizedError('Invalid credentials')

    return jsonify({
        'success': True,
        'message': 'Login successful',
        'data': {'user': user.to_dict(), 'token': create_access_token(user)},
    })


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({'success': True, 'data': {'user': g.current_user.to_dict()}})


@auth_bp.route('/refresh', methods=['POST'])
@login_required
def refresh():
    """Issue a new token for the bearer of a still-valid one"""
    return jsonify({'success': True, 'data': {'token': create_access_token(g.current_user)}})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    # Tokens are stateless; the client drops its copy
    return jsonify({'success': True, 'message': 'Logged out successfully'})
