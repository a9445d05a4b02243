"""
Dashboard aggregates.

Every view except the activity feed leaves ARCHIVED members out. Status
counts are evaluated against `now` so a member whose expiry passed since
the last write is already counted as INACTIVE.
"""
import calendar
from datetime import datetime, timedelta

from flask import current_app

from gymadmin.utils.helpers import (
    parse_int, start_of_day, start_of_month, to_api_timestamp, to_db_timestamp, utcnow,
)
from gymadmin.utils.membership import EXPIRING_WINDOW, Gender, MembershipType

from .check_in import CheckIn
from .database import execute_query, fetch_scalar
from .payment import Payment
from .workout import Workout

MIN_YEAR = 1970
MAX_YEAR = 2100

AGE_RANGES = [
    (16, 25, '16-25'),
    (26, 35, '26-35'),
    (36, 45, '36-45'),
    (46, 55, '46-55'),
    (56, 100, '56+'),
]


def _db_path():
    return current_app.config.get('DATABASE_PATH', 'gym_admin.db')


def fill_monthly_buckets(year, new_members, revenue, check_ins):
    """
    Twelve buckets January..December. The three mappings are sparse
    {month_number: value}; months missing from them report zero.
    """
    return [
        {
            'month': calendar.month_abbr[month],
            'monthNumber': month,
            'newMembers': new_members.get(month, 0),
            'revenue': round(float(revenue.get(month, 0)), 2),
            'checkIns': check_ins.get(month, 0),
            'year': year,
        }
        for month in range(1, 13)
    ]


def parse_year(value, default):
    if value is None or value == '':
        return default
    return parse_int(value, 'Invalid year', minimum=MIN_YEAR, maximum=MAX_YEAR)


def _per_month(query, start, end, db_path):
    rows = execute_query(query, (to_db_timestamp(start), to_db_timestamp(end)), db_path, fetch=True)
    return {row['month']: row['value'] for row in rows}


def get_monthly_stats(year=None):
    db_path = _db_path()
    year = parse_year(year, utcnow().year)
    start, end = datetime(year, 1, 1), datetime(year + 1, 1, 1)

    new_members = _per_month(
        '''SELECT CAST(strftime('%m', join_date) AS INTEGER) AS month, COUNT(*) AS value
           FROM members WHERE join_date >= ? AND join_date < ? GROUP BY month''',
        start, end, db_path
    )
    revenue = _per_month(
        '''SELECT CAST(strftime('%m', paid_at) AS INTEGER) AS month, SUM(amount) AS value
           FROM payments WHERE status = 'PAID' AND paid_at >= ? AND paid_at < ? GROUP BY month''',
        start, end, db_path
    )
    check_ins = _per_month(
        '''SELECT CAST(strftime('%m', check_in_at) AS INTEGER) AS month, COUNT(*) AS value
           FROM check_ins WHERE check_in_at >= ? AND check_in_at < ? GROUP BY month''',
        start, end, db_path
    )
    return fill_monthly_buckets(year, new_members, revenue, check_ins)


def get_overview(now=None):
    db_path = _db_path()
    now = now or utcnow()
    now_stamp = to_db_timestamp(now)
    window_stamp = to_db_timestamp(now + EXPIRING_WINDOW)
    today = start_of_day(now)
    month_start = to_db_timestamp(start_of_month(now))

    row = execute_query(
        '''SELECT
               COALESCE(SUM(status != 'ARCHIVED'), 0) AS total,
               COALESCE(SUM(status != 'ARCHIVED' AND expiry_date > ?), 0) AS active,
               COALESCE(SUM(status != 'ARCHIVED' AND expiry_date <= ?), 0) AS inactive,
               COALESCE(SUM(status != 'ARCHIVED' AND expiry_date > ? AND expiry_date <= ?), 0)
                   AS expiring,
               COALESCE(SUM(status = 'ARCHIVED'), 0) AS archived,
               COALESCE(SUM(status != 'ARCHIVED' AND join_date >= ?), 0) AS joined
           FROM members''',
        (window_stamp, now_stamp, now_stamp, window_stamp, month_start), db_path, fetch=True
    )[0]

    return {
        'totalMembers': row['total'],
        'activeMembers': row['active'],
        'inactiveMembers': row['inactive'],
        'expiringSoon': row['expiring'],
        'archivedMembers': row['archived'],
        'todayCheckIns': fetch_scalar(
            'SELECT COUNT(*) FROM check_ins WHERE check_in_at >= ? AND check_in_at < ?',
            (to_db_timestamp(today), to_db_timestamp(today + timedelta(days=1))), db_path
        ),
        'monthlyRevenue': round(float(fetch_scalar(
            "SELECT SUM(amount) FROM payments WHERE status = 'PAID' AND paid_at >= ?",
            (month_start,), db_path
        )), 2),
        'newMembersThisMonth': row['joined'],
    }


def _grouped_counts(column):
    rows = execute_query(
        f'''SELECT {column} AS value, COUNT(*) AS count FROM members
            WHERE status != 'ARCHIVED' GROUP BY {column}''',
        (), _db_path(), fetch=True
    )
    return {row['value']: row['count'] for row in rows}


def get_membership_distribution():
    counts = _grouped_counts('membership_type')
    return [{'type': t.value, 'count': counts.get(t.value, 0)} for t in MembershipType]


def get_gender_distribution():
    counts = _grouped_counts('gender')
    return [{'gender': g.value, 'count': counts.get(g.value, 0)} for g in Gender]


def get_age_distribution():
    db_path = _db_path()
    return [
        {
            'range': label,
            'count': fetch_scalar(
                '''SELECT COUNT(*) FROM members
                   WHERE age >= ? AND age <= ? AND status != 'ARCHIVED' ''',
                (low, high), db_path
            ),
        }
        for low, high, label in AGE_RANGES
    ]


def parse_activity_limit(value, default=20):
    if value is None or value == '':
        return default
    return parse_int(value, 'Limit must be between 1 and 50', minimum=1, maximum=50)


def _activity_member(record):
    if record.member is None:
        return None
    return {
        'id': record.member['id'],
        'name': record.member['name'],
        'profilePicture': record.member.get('profilePicture'),
    }


def get_recent_activities(limit=20):
    """Latest check-ins, payments and workouts merged newest first."""
    activities = []
    for check_in in CheckIn.get_recent(limit):
        activities.append((check_in.check_in_at, {
            'type': 'CHECK_IN',
            'member': _activity_member(check_in),
            'data': {'checkInAt': to_api_timestamp(check_in.check_in_at)},
        }))
    for payment in Payment.get_recent(limit):
        created = payment.created_at
        activities.append((created, {
            'type': 'PAYMENT',
            'member': _activity_member(payment),
            'data': {'amount': round(float(payment.amount), 2), 'status': payment.status},
        }))
    for workout in Workout.get_recent(limit):
        activities.append((workout.workout_at, {
            'type': 'WORKOUT',
            'member': _activity_member(workout),
            'data': {'duration': workout.duration, 'workoutType': workout.workout_type},
        }))

    normalized = []
    for moment, item in activities:
        stamp = to_db_timestamp(moment)
        item['timestamp'] = to_api_timestamp(stamp)
        normalized.append((stamp, item))
    normalized.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in normalized[:limit]]
