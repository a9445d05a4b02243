# tests/unit/test_tokens.py
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest

from gymadmin.utils.errors import UnauthorizedError
from gymadmin.utils.tokens import bearer_token, create_access_token, decode_access_token

USER = SimpleNamespace(id=7, email='admin@example.com', role='ADMIN')


def test_token_carries_identity_claims(flask_app):
    with flask_app.app_context():
        claims = decode_access_token(create_access_token(USER))
    assert claims['id'] == 7
    assert claims['email'] == 'admin@example.com'
    assert claims['role'] == 'ADMIN'
    assert claims['exp'] - claims['iat'] == flask_app.config['JWT_EXPIRES_IN']


def test_expired_token_rejected(flask_app):
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode({'id': 7, 'iat': past, 'exp': past + timedelta(hours=1)},
                       flask_app.config['JWT_SECRET_KEY'], algorithm='HS256')
    with flask_app.app_context():
        with pytest.raises(UnauthorizedError, match='Token expired'):
            decode_access_token(token)


def test_token_signed_with_other_secret_rejected(flask_app):
    token = jwt.encode({'id': 7}, 'someone-else-entirely-different-secret-key', algorithm='HS256')
    with flask_app.app_context():
        with pytest.raises(UnauthorizedError, match='Invalid token'):
            decode_access_token(token)


def test_garbage_token_rejected(flask_app):
    with flask_app.app_context():
        with pytest.raises(UnauthorizedError, match='Invalid token'):
            decode_access_token('not.a.jwt')


@pytest.mark.parametrize('headers', [{}, {'Authorization': 'Basic abc'}, {'Authorization': 'Bearer '}])
def test_bearer_token_required(headers):
    with pytest.raises(UnauthorizedError, match='Access token required'):
        bearer_token(headers)


def test_bearer_token_extracted():
    assert bearer_token({'Authorization': 'Bearer abc.def.ghi'}) == 'abc.def.ghi'
