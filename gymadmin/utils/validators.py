"""
Request payload validation.

Each validator checks fields in a fixed order and raises BadRequestError
with the message of the first field that fails. `partial=True` validates
only the fields present (used by updates).
"""
from decimal import Decimal, InvalidOperation

from gymadmin.models.payment import PaymentStatus, PaymentType
from gymadmin.models.workout import WorkoutType
from gymadmin.utils.errors import BadRequestError
from gymadmin.utils.helpers import normalize_email, parse_datetime, parse_int, validate_email
from gymadmin.utils.membership import Gender, MemberStatus, MembershipType

# payments.amount is DECIMAL(10,2)
MAX_AMOUNT = Decimal('99999999.99')


def _require_object(data):
    if not isinstance(data, dict):
        raise BadRequestError('Request body must be a JSON object')
    return data


def _text(data, key, min_length, message):
    value = data.get(key)
    if not isinstance(value, str) or len(value.strip()) < min_length:
        raise BadRequestError(message)
    return value.strip()


def _email(data, key='email'):
    value = data.get(key)
    if not isinstance(value, str) or not validate_email(value.strip()):
        raise BadRequestError('Invalid email address')
    return normalize_email(value)


def _choice(data, key, enum_cls, message):
    value = data.get(key)
    try:
        return enum_cls(str(value).strip().upper()).value
    except ValueError:
        raise BadRequestError(message)


def _timestamp(data, key, message):
    value = data.get(key)
    try:
        parsed = parse_datetime(value)
    except (TypeError, ValueError):
        raise BadRequestError(message)
    if parsed is None:
        raise BadRequestError(message)
    return parsed


def _optional_text(data, key):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequestError(f'{key} must be a string')
    return value.strip() or None


def _wanted(data, key, partial):
    return not partial or key in data


def _password(data, min_length, message):
    value = data.get('password')
    if not isinstance(value, str) or len(value) < min_length:
        raise BadRequestError(message)
    return value


# -------------------- auth --------------------

def validate_registration(data):
    data = _require_object(data)
    return {
        'email': _email(data),
        'password': _password(data, min_length=6,
                              message='Password must be at least 6 characters'),
        'name': _text(data, 'name', 2, 'Name must be at least 2 characters'),
    }


def validate_login(data):
    data = _require_object(data)
    return {
        'email': _email(data),
        'password': _password(data, min_length=1, message='Password is required'),
    }


# -------------------- members --------------------

def validate_member(data, partial=False):
    data = _require_object(data)
    cleaned = {}
    if _wanted(data, 'name', partial):
        cleaned['name'] = _text(data, 'name', 2, 'Name must be at least 2 characters')
    if _wanted(data, 'age', partial):
        cleaned['age'] = parse_int(data.get('age'), 'Age must be between 16 and 100',
                                   minimum=16, maximum=100)
    if _wanted(data, 'gender', partial):
        cleaned['gender'] = _choice(data, 'gender', Gender, 'Invalid gender')
    if _wanted(data, 'email', partial):
        cleaned['email'] = _email(data)
    if _wanted(data, 'phone', partial):
        cleaned['phone'] = _text(data, 'phone', 10, 'Phone number must be at least 10 characters')
    if _wanted(data, 'membershipType', partial):
        cleaned['membership_type'] = _choice(data, 'membershipType', MembershipType,
                                             'Invalid membership type')
    # expiryDate is optional on create: it defaults from joinDate + membership months
    if 'expiryDate' in data and data['expiryDate'] is not None:
        cleaned['expiry_date'] = _timestamp(data, 'expiryDate', 'Invalid expiry date')
    if 'joinDate' in data and data['joinDate'] is not None:
        cleaned['join_date'] = _timestamp(data, 'joinDate', 'Invalid join date')
    if partial and 'status' in data:
        cleaned['status'] = _choice(data, 'status', MemberStatus, 'Invalid status')
    if 'profilePicture' in data:
        cleaned['profile_picture'] = _optional_text(data, 'profilePicture')
    return cleaned


# -------------------- payments --------------------

def _amount(data):
    value = data.get('amount')
    if isinstance(value, bool):
        raise BadRequestError('Amount must be greater than 0')
    try:
        amount = Decimal(str(value))
        if amount.is_finite() and amount > MAX_AMOUNT:
            raise BadRequestError('Amount must not exceed 99999999.99')
        if not amount.is_finite() or amount < Decimal('0.01'):
            raise BadRequestError('Amount must be greater than 0')
        amount = amount.quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError):
        raise BadRequestError('Amount must be greater than 0')
    return float(amount)


def _member_id(data):
    value = data.get('memberId')
    if value is None or value == '':
        raise BadRequestError('Member ID is required')
    return parse_int(value, 'Member ID is required', minimum=1)


def validate_payment(data, partial=False):
    data = _require_object(data)
    cleaned = {}
    if not partial:
        cleaned['member_id'] = _member_id(data)
    if _wanted(data, 'amount', partial):
        cleaned['amount'] = _amount(data)
    if _wanted(data, 'paymentType', partial):
        cleaned['payment_type'] = _choice(data, 'paymentType', PaymentType, 'Invalid payment type')
    if partial and 'status' in data:
        cleaned['status'] = _choice(data, 'status', PaymentStatus, 'Invalid status')
    if _wanted(data, 'dueDate', partial):
        cleaned['due_date'] = _timestamp(data, 'dueDate', 'Invalid due date')
    if 'notes' in data:
        cleaned['notes'] = _optional_text(data, 'notes')
    return cleaned


# -------------------- workouts --------------------

def validate_workout(data, partial=False):
    data = _require_object(data)
    cleaned = {}
    if not partial:
        cleaned['member_id'] = _member_id(data)
    if _wanted(data, 'workoutType', partial):
        cleaned['workout_type'] = _choice(data, 'workoutType', WorkoutType, 'Invalid workout type')
    if _wanted(data, 'duration', partial):
        cleaned['duration'] = parse_int(data.get('duration'),
                                        'Duration must be at least 1 minute', minimum=1)
    if 'calories' in data:
        if data['calories'] is None:
            cleaned['calories'] = None
        else:
            cleaned['calories'] = parse_int(data['calories'],
                                            'Calories must be non-negative', minimum=0)
    if 'workoutAt' in data and data['workoutAt'] is not None:
        cleaned['workout_at'] = _timestamp(data, 'workoutAt', 'Invalid workout date')
    if 'notes' in data:
        cleaned['notes'] = _optional_text(data, 'notes')
    return cleaned


# -------------------- check-ins --------------------

def validate_check_in(data):
    data = _require_object(data)
    cleaned = {'member_id': _member_id(data)}
    if data.get('checkInAt') is not None:
        cleaned['check_in_at'] = _timestamp(data, 'checkInAt', 'Invalid check-in date')
    return cleaned
