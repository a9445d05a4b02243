# tests/unit/test_decorators.py
from types import SimpleNamespace

import pytest
from flask import g

from gymadmin.models.user import User
from gymadmin.utils import decorators
from gymadmin.utils.errors import ForbiddenError, UnauthorizedError
from gymadmin.utils.tokens import create_access_token


def _make_dummy_view():
    @decorators.login_required
    def view_fn():
        # sentinel return value to prove it ran
        return g.current_user.email
    return view_fn


def _save_user(email='staff@example.com', role='ADMIN', is_active=True):
    user = User(email=email, name='Staff', role=role, is_active=is_active)
    user.set_password('secret123')
    user.save()
    return user


def test_login_required_rejects_missing_token(flask_app):
    view = _make_dummy_view()
    with flask_app.test_request_context('/protected'):
        with pytest.raises(UnauthorizedError, match='Access token required'):
            view()


def test_login_required_sets_current_user(flask_app):
    view = _make_dummy_view()
    with flask_app.app_context():
        token = create_access_token(_save_user())
    with flask_app.test_request_context('/protected', headers={'Authorization': f'Bearer {token}'}):
        assert view() == 'staff@example.com'


def test_login_required_rejects_inactive_user(flask_app):
    view = _make_dummy_view()
    with flask_app.app_context():
        token = create_access_token(_save_user(is_active=False))
    with flask_app.test_request_context('/protected', headers={'Authorization': f'Bearer {token}'}):
        with pytest.raises(UnauthorizedError, match='User not found or inactive'):
            view()


def test_login_required_rejects_deleted_user(flask_app):
    view = _make_dummy_view()
    with flask_app.app_context():
        token = create_access_token(SimpleNamespace(id=999, email='ghost@example.com', role='ADMIN'))
    with flask_app.test_request_context('/protected', headers={'Authorization': f'Bearer {token}'}):
        with pytest.raises(UnauthorizedError, match='User not found or inactive'):
            view()


# -------------------------
# role_required
# -------------------------
@decorators.super_admin_required
def _super_only():
    return 'OK'


def test_role_required_without_user(flask_app):
    with flask_app.test_request_context('/super'):
        with pytest.raises(UnauthorizedError, match='Authentication required'):
            _super_only()


def test_role_required_denies_other_roles(flask_app):
    with flask_app.test_request_context('/super'):
        g.current_user = SimpleNamespace(role='ADMIN')
        with pytest.raises(ForbiddenError, match='Insufficient permissions'):
            _super_only()


def test_role_required_allows_listed_role(flask_app):
    with flask_app.test_request_context('/super'):
        g.current_user = SimpleNamespace(role='SUPER_ADMIN')
        assert _super_only() == 'OK'


def test_admin_required_accepts_both_admin_roles(flask_app):
    view = decorators.admin_required(lambda: 'OK')
    for role in ('ADMIN', 'SUPER_ADMIN'):
        with flask_app.test_request_context('/admin'):
            g.current_user = SimpleNamespace(role=role)
            assert view() == 'OK'
