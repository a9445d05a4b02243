# tests/unit/test_validators.py
from datetime import datetime

import pytest

from gymadmin.utils.errors import BadRequestError
from gymadmin.utils import validators

MEMBER = {
    'name': 'Jane Doe',
    'age': 30,
    'gender': 'female',
    'email': ' Jane@Example.COM ',
    'phone': '5551234567',
    'membershipType': 'one_month',
    'expiryDate': '2030-01-01T00:00:00Z',
}


def _error(fn, *args, **kwargs):
    with pytest.raises(BadRequestError) as exc:
        fn(*args, **kwargs)
    return exc.value.message


# -------------------------
# auth
# -------------------------
def test_registration_normalises_email():
    data = validators.validate_registration(
        {'email': 'Admin@Gym.COM', 'password': 'secret1', 'name': 'Ad'}
    )
    assert data == {'email': 'admin@gym.com', 'password': 'secret1', 'name': 'Ad'}


def test_registration_reports_first_failure_only():
    assert _error(validators.validate_registration,
                  {'email': 'nope', 'password': 'x', 'name': ''}) == 'Invalid email address'
    assert _error(validators.validate_registration,
                  {'email': 'a@b.co', 'password': 'short', 'name': ''}) \
        == 'Password must be at least 6 characters'


def test_login_requires_password():
    assert _error(validators.validate_login, {'email': 'a@b.co'}) == 'Password is required'


def test_non_object_body_rejected():
    assert _error(validators.validate_login, None) == 'Request body must be a JSON object'
    assert _error(validators.validate_member, ['a']) == 'Request body must be a JSON object'


# -------------------------
# members
# -------------------------
def test_member_cleaned_fields():
    data = validators.validate_member(MEMBER)
    assert data['email'] == 'jane@example.com'
    assert data['gender'] == 'FEMALE'
    assert data['membership_type'] == 'ONE_MONTH'
    assert data['expiry_date'] == datetime(2030, 1, 1)
    assert 'status' not in data


def test_member_expiry_is_optional():
    payload = {k: v for k, v in MEMBER.items() if k != 'expiryDate'}
    assert 'expiry_date' not in validators.validate_member(payload)


@pytest.mark.parametrize('field, value, message', [
    ('name', 'J', 'Name must be at least 2 characters'),
    ('age', 15, 'Age must be between 16 and 100'),
    ('age', 101, 'Age must be between 16 and 100'),
    ('age', 'thirty', 'Age must be between 16 and 100'),
    ('gender', 'robot', 'Invalid gender'),
    ('email', 'bad-email', 'Invalid email address'),
    ('phone', '12345', 'Phone number must be at least 10 characters'),
    ('membershipType', 'TWO_WEEKS', 'Invalid membership type'),
    ('expiryDate', 'soon', 'Invalid expiry date'),
])
def test_member_field_errors(field, value, message):
    assert _error(validators.validate_member, {**MEMBER, field: value}) == message


def test_member_partial_only_checks_present_fields():
    assert validators.validate_member({'phone': '5559876543'}, partial=True) == {'phone': '5559876543'}
    assert validators.validate_member({'status': 'archived'}, partial=True) == {'status': 'ARCHIVED'}
    assert _error(validators.validate_member, {'status': 'gone'}, partial=True) == 'Invalid status'


# -------------------------
# payments
# -------------------------
PAYMENT = {'memberId': 3, 'amount': '19.999', 'paymentType': 'class', 'dueDate': '2030-02-01'}


def test_payment_cleaned_fields():
    data = validators.validate_payment(PAYMENT)
    assert data == {
        'member_id': 3,
        'amount': 20.0,
        'payment_type': 'CLASS',
        'due_date': datetime(2030, 2, 1),
    }


@pytest.mark.parametrize('field, value, message', [
    ('memberId', None, 'Member ID is required'),
    ('amount', 0, 'Amount must be greater than 0'),
    ('amount', -5, 'Amount must be greater than 0'),
    ('amount', 'NaN', 'Amount must be greater than 0'),
    ('amount', True, 'Amount must be greater than 0'),
    ('amount', '1e400', 'Amount must not exceed 99999999.99'),
    ('amount', 100000000, 'Amount must not exceed 99999999.99'),
    ('paymentType', 'BITCOIN', 'Invalid payment type'),
    ('dueDate', 'tomorrow', 'Invalid due date'),
])
def test_payment_field_errors(field, value, message):
    assert _error(validators.validate_payment, {**PAYMENT, field: value}) == message


def test_payment_partial_status():
    assert validators.validate_payment({'status': 'paid'}, partial=True) == {'status': 'PAID'}


# -------------------------
# workouts / check-ins
# -------------------------
def test_workout_validation():
    data = validators.validate_workout(
        {'memberId': '4', 'workoutType': 'strength', 'duration': 60, 'calories': None}
    )
    assert data == {'member_id': 4, 'workout_type': 'STRENGTH', 'duration': 60, 'calories': None}
    assert _error(validators.validate_workout,
                  {'memberId': 4, 'workoutType': 'CARDIO', 'duration': 0}) \
        == 'Duration must be at least 1 minute'
    assert _error(validators.validate_workout,
                  {'memberId': 4, 'workoutType': 'CARDIO', 'duration': 10, 'calories': -1}) \
        == 'Calories must be non-negative'


def test_check_in_validation():
    assert validators.validate_check_in({'memberId': 2}) == {'member_id': 2}
    data = validators.validate_check_in({'memberId': 2, 'checkInAt': '2024-01-02T08:00:00Z'})
    assert data['check_in_at'] == datetime(2024, 1, 2, 8, 0)


def test_payment_amount_rounds_to_cents():
    assert validators.validate_payment({**PAYMENT, 'amount': '12.346'})['amount'] == 12.35
    assert validators.validate_payment({**PAYMENT, 'amount': '99999999.99'})['amount'] == 99999999.99
