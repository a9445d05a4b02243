from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from gymadmin.utils.errors import UnauthorizedError


def create_access_token(user):
    """Sign a bearer token carrying the user's id, email and role."""
    now = datetime.now(timezone.utc)
    payload = {
        'id': user.id,
        'email': user.email,
        'role': user.role,
        'iat': now,
        'exp': now + timedelta(seconds=int(current_app.config['JWT_EXPIRES_IN'])),
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM'],
    )


def decode_access_token(token):
    """Verify signature and expiry; raise UnauthorizedError otherwise."""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']],
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError('Token expired')
    except jwt.InvalidTokenError:
        raise UnauthorizedError('Invalid token')


def bearer_token(headers):
    """Extract the token from an `Authorization: Bearer <token>` header."""
    auth_header = headers.get('Authorization', '')
    if not auth_header.startswith('Bearer ') or not auth_header[7:].strip():
        raise UnauthorizedError('Access token required')
    return auth_header[7:].strip()
