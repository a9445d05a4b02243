from datetime import timedelta
from enum import Enum

from flask import current_app

from gymadmin.utils.helpers import (
    parse_datetime, start_of_day, start_of_month, start_of_week, to_api_timestamp,
    to_db_timestamp, utcnow,
)

from .database import execute_query, fetch_scalar


class WorkoutType(str, Enum):
    CARDIO = 'CARDIO'
    STRENGTH = 'STRENGTH'
    FLEXIBILITY = 'FLEXIBILITY'
    SPORTS = 'SPORTS'
    OTHER = 'OTHER'


WORKOUT_COLUMNS = '''
    w.id, w.member_id, w.workout_type, w.duration, w.calories, w.notes,
    w.workout_at, w.created_at,
    mb.name AS member_name, mb.email AS member_email,
    mb.profile_picture AS member_profile_picture
'''

WORKOUT_FROM = 'workouts w LEFT JOIN members mb ON mb.id = w.member_id'

SORT_FIELDS = {
    'workoutAt': 'w.workout_at',
    'duration': 'w.duration',
    'calories': 'w.calories',
    'createdAt': 'w.created_at',
}

UPDATABLE_FIELDS = ('workout_type', 'duration', 'calories', 'workout_at', 'notes')


def _range_clauses(start_date, end_date):
    clauses, params = [], []
    if start_date:
        clauses.append('w.workout_at >= ?')
        params.append(to_db_timestamp(start_date))
    if end_date:
        clauses.append('w.workout_at <= ?')
        params.append(to_db_timestamp(end_date))
    return clauses, params


class Workout:
    def __init__(self, id=None, member_id=None, workout_type=None, duration=None,
                 calories=None, notes=None, workout_at=None, created_at=None):
        self.id = id
        self.member_id = member_id
        self.workout_type = workout_type
        self.duration = duration
        self.calories = calories
        self.notes = notes
        self.workout_at = parse_datetime(workout_at)
        self.created_at = created_at
        self.member = None

    @classmethod
    def _db_path(cls):
        return current_app.config.get('DATABASE_PATH', 'gym_admin.db')

    @classmethod
    def _from_row(cls, row):
        if not row:
            return None
        workout = cls(
            id=row['id'], member_id=row['member_id'], workout_type=row['workout_type'],
            duration=row['duration'], calories=row['calories'], notes=row['notes'],
            workout_at=row['workout_at'], created_at=row['created_at']
        )
        if row['member_name'] is not None:
            workout.member = {
                'id': row['member_id'],
                'name': row['member_name'],
                'email': row['member_email'],
                'profilePicture': row['member_profile_picture'],
            }
        return workout

    @classmethod
    def get_by_id(cls, workout_id):
        query = f'SELECT {WORKOUT_COLUMNS} FROM {WORKOUT_FROM} WHERE w.id = ? LIMIT 1'
        rows = execute_query(query, (workout_id,), cls._db_path(), fetch=True)
        return cls._from_row(rows[0]) if rows else None

    @classmethod
    def get_for_member(cls, member_id, limit=10):
        query = f'''SELECT {WORKOUT_COLUMNS} FROM {WORKOUT_FROM}
                    WHERE w.member_id = ? ORDER BY w.workout_at DESC, w.id DESC LIMIT ?'''
        rows = execute_query(query, (member_id, limit), cls._db_path(), fetch=True)
        return [cls._from_row(r) for r in rows]

    @classmethod
    def get_recent(cls, limit=20):
        query = f'''SELECT {WORKOUT_COLUMNS} FROM {WORKOUT_FROM}
                    ORDER BY w.workout_at DESC, w.id DESC LIMIT ?'''
        rows = execute_query(query, (limit,), cls._db_path(), fetch=True)
        return [cls._from_row(r) for r in rows]

    @classmethod
    def search(cls, member_id=None, workout_type=None, start_date=None, end_date=None,
               page=1, limit=10, sort_column='w.workout_at', sort_order='DESC'):
        """Filtered, paginated workouts. Returns (workouts, total)."""
        db_path = cls._db_path()
        clauses, params = _range_clauses(start_date, end_date)
        if member_id is not None:
            clauses.append('w.member_id = ?')
            params.append(member_id)
        if workout_type:
            clauses.append('w.workout_type = ?')
            params.append(workout_type)
        where = ' AND '.join(clauses) or '1 = 1'

        total = fetch_scalar(f'SELECT COUNT(*) FROM workouts w WHERE {where}', tuple(params), db_path)
        query = f'''
            SELECT {WORKOUT_COLUMNS} FROM {WORKOUT_FROM}
            WHERE {where}
            ORDER BY {sort_column} {sort_order}, w.id DESC
            LIMIT ? OFFSET ?
        '''
        rows = execute_query(query, tuple(params) + (limit, (page - 1) * limit), db_path, fetch=True)
        return [cls._from_row(r) for r in rows], total

    @classmethod
    def get_overview(cls, now=None):
        db_path = cls._db_path()
        now = now or utcnow()
        today = start_of_day(now)

        def count_between(start, end=None):
            if end is None:
                return fetch_scalar('SELECT COUNT(*) FROM workouts WHERE workout_at >= ?',
                                    (to_db_timestamp(start),), db_path)
            return fetch_scalar(
                'SELECT COUNT(*) FROM workouts WHERE workout_at >= ? AND workout_at < ?',
                (to_db_timestamp(start), to_db_timestamp(end)), db_path
            )

        totals = execute_query(
            '''SELECT COUNT(*) AS total,
                      COALESCE(SUM(duration), 0) AS duration,
                      COALESCE(SUM(calories), 0) AS calories,
                      AVG(duration) AS average
               FROM workouts''',
            (), db_path, fetch=True
        )[0]
        rows = execute_query(
            '''SELECT workout_type, COUNT(*) AS count FROM workouts
               GROUP BY workout_type ORDER BY workout_type''',
            (), db_path, fetch=True
        )
        return {
            'totalWorkouts': totals['total'],
            'todayWorkouts': count_between(today, today + timedelta(days=1)),
            'weeklyWorkouts': count_between(start_of_week(now)),
            'monthlyWorkouts': count_between(start_of_month(now)),
            'totalDuration': totals['duration'],
            'totalCalories': totals['calories'],
            'averageDuration': round(totals['average'] or 0, 2),
            'workoutTypeDistribution': [
                {'type': r['workout_type'], 'count': r['count']} for r in rows
            ],
        }

    @classmethod
    def get_member_totals(cls, member_id):
        row = execute_query(
            '''SELECT COUNT(*) AS total, COALESCE(SUM(duration), 0) AS duration,
                      COALESCE(SUM(calories), 0) AS calories
               FROM workouts WHERE member_id = ?''',
            (member_id,), cls._db_path(), fetch=True
        )[0]
        return {
            'totalWorkouts': row['total'],
            'totalDuration': row['duration'],
            'totalCalories': row['calories'],
        }

    @classmethod
    def create(cls, data, now=None):
        workout = cls(
            member_id=data['member_id'], workout_type=data['workout_type'],
            duration=data['duration'], calories=data.get('calories'),
            notes=data.get('notes'), workout_at=data.get('workout_at') or now or utcnow()
        )
        workout.save()
        return workout

    def apply_update(self, data):
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(self, field, data[field])
        self.save()
        return self

    def delete(self):
        execute_query('DELETE FROM workouts WHERE id = ?', (self.id,), self._db_path())

    def save(self):
        """Insert or update the workout row."""
        db_path = self._db_path()
        params = (self.member_id, self.workout_type, self.duration, self.calories,
                  self.notes, to_db_timestamp(self.workout_at))
        if self.id:
            query = '''UPDATE workouts
                       SET member_id = ?, workout_type = ?, duration = ?, calories = ?,
                           notes = ?, workout_at = ?
                       WHERE id = ?'''
            execute_query(query, params + (self.id,), db_path)
            return self.id

        stamp = to_db_timestamp(utcnow())
        query = '''INSERT INTO workouts (member_id, workout_type, duration, calories, notes,
                                         workout_at, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)'''
        self.id = execute_query(query, params + (stamp,), db_path)
        self.created_at = stamp
        return self.id

    def to_dict(self):
        data = {
            'id': self.id,
            'memberId': self.member_id,
            'workoutType': self.workout_type,
            'duration': self.duration,
            'calories': self.calories,
            'notes': self.notes,
            'workoutAt': to_api_timestamp(self.workout_at),
            'createdAt': to_api_timestamp(self.created_at),
        }
        if self.member is not None:
            data['member'] = self.member
        return data
