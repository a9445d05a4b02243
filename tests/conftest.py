import sys
from datetime import timedelta
from pathlib import Path

import pytest

# -------------------------------------------------------------------
# Ensure repository root is on sys.path so `import gymadmin...` works
# -------------------------------------------------------------------
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from gymadmin.app import create_app  # noqa: E402
from gymadmin.utils.helpers import to_api_timestamp, utcnow  # noqa: E402

ADMIN = {'email': 'admin@example.com', 'password': 'secret123', 'name': 'Gym Admin'}


# -------------------------------------------------------------------
# Flask app fixture (fresh SQLite file per test)
# -------------------------------------------------------------------
@pytest.fixture()
def flask_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'JWT_SECRET_KEY': 'test-jwt-secret-key-for-the-suite-0123456789',
        'DATABASE_PATH': str(tmp_path / 'test_gym.db'),
        'BCRYPT_LOG_ROUNDS': 4,
        'APP_ENV': 'test',
        'DEFAULT_ADMIN_EMAIL': None,
        'DEFAULT_ADMIN_PASSWORD': None,
    })
    yield app


@pytest.fixture()
def client(flask_app):
    """Flask test client fixture."""
    return flask_app.test_client()


@pytest.fixture()
def auth_token(client):
    resp = client.post('/api/auth/register', json=ADMIN)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()['data']['token']


@pytest.fixture()
def auth_headers(auth_token):
    return {'Authorization': f'Bearer {auth_token}'}


def iso_in(days):
    """API timestamp `days` from now (negative for the past)."""
    return to_api_timestamp(utcnow() + timedelta(days=days))


def member_payload(**overrides):
    payload = {
        'name': 'Jane Doe',
        'age': 30,
        'gender': 'FEMALE',
        'email': 'jane@example.com',
        'phone': '5551234567',
        'membershipType': 'ONE_YEAR',
        'expiryDate': iso_in(200),
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def create_member(client, auth_headers):
    """POST a member (defaults overridable by keyword) and return its JSON."""
    def _create(**overrides):
        resp = client.post('/api/members', json=member_payload(**overrides), headers=auth_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['data']['member']
    return _create


@pytest.fixture()
def create_payment(client, auth_headers):
    def _create(member_id, **overrides):
        payload = {
            'memberId': member_id,
            'amount': 49.99,
            'paymentType': 'MEMBERSHIP',
            'dueDate': iso_in(10),
        }
        payload.update(overrides)
        resp = client.post('/api/payments', json=payload, headers=auth_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['data']['payment']
    return _create


@pytest.fixture()
def create_workout(client, auth_headers):
    def _create(member_id, **overrides):
        payload = {'memberId': member_id, 'workoutType': 'CARDIO', 'duration': 45, 'calories': 300}
        payload.update(overrides)
        resp = client.post('/api/workouts', json=payload, headers=auth_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['data']['workout']
    return _create
