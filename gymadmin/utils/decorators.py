from functools import wraps

from flask import current_app, g, request

from gymadmin.models.user import User
from gymadmin.utils.errors import ForbiddenError, UnauthorizedError
from gymadmin.utils.tokens import bearer_token, decode_access_token


def load_current_user():
    """Resolve the bearer token on the current request to an active User."""
    claims = decode_access_token(bearer_token(request.headers))
    user = User.get_by_id(claims.get('id'))
    if not user or not user.is_active:
        raise UnauthorizedError('User not found or inactive')
    return user


def login_required(f):
    """Decorator to require a valid bearer token; sets g.current_user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.current_user = load_current_user()
        return f(*args, **kwargs)
    return decorated_function


def role_required(*allowed_roles):
    """Decorator to require specific roles (stack under login_required)"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = g.get('current_user')
            if user is None:
                raise UnauthorizedError('Authentication required')
            if user.role not in allowed_roles:
                current_app.logger.info(
                    "Denied %s %s for role %s", request.method, request.path, user.role
                )
                raise ForbiddenError('Insufficient permissions')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = role_required('ADMIN', 'SUPER_ADMIN')
super_admin_required = role_required('SUPER_ADMIN')
