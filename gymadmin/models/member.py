from flask import current_app

from gymadmin.utils.errors import BadRequestError, ConflictError
from gymadmin.utils.helpers import (
    calculate_expiry_date, parse_datetime, to_api_timestamp, to_db_timestamp, utcnow,
)
from gymadmin.utils.membership import (
    EXPIRING_WINDOW, MemberStatus, MembershipType, archive, derive_status, restore,
)

from .check_in import CheckIn
from .database import execute_query, fetch_scalar
from .payment import Payment
from .workout import Workout

MEMBER_COLUMNS = '''
    m.id, m.name, m.age, m.gender, m.email, m.phone, m.membership_type,
    m.expiry_date, m.status, m.join_date, m.profile_picture, m.created_at, m.updated_at
'''

COUNT_COLUMNS = '''
    (SELECT COUNT(*) FROM check_ins c WHERE c.member_id = m.id) AS check_in_count,
    (SELECT COUNT(*) FROM payments p WHERE p.member_id = m.id) AS payment_count,
    (SELECT COUNT(*) FROM workouts w WHERE w.member_id = m.id) AS workout_count
'''

# Sort keys exposed by GET /members
SORT_FIELDS = {
    'name': 'm.name',
    'joinDate': 'm.join_date',
    'expiryDate': 'm.expiry_date',
    'status': 'effective_status',
}

UPDATABLE_FIELDS = ('name', 'age', 'gender', 'email', 'phone', 'membership_type',
                    'join_date', 'profile_picture')


class Member:
    """
    A gym customer. `status` holds the value computed at the last write;
    `effective_status(now)` is what the API reports and filters on.
    """

    def __init__(self, id=None, name=None, age=None, gender=None, email=None, phone=None,
                 membership_type=None, expiry_date=None, status=MemberStatus.ACTIVE.value,
                 join_date=None, profile_picture=None, created_at=None, updated_at=None):
        self.id = id
        self.name = name
        self.age = age
        self.gender = gender
        self.email = email
        self.phone = phone
        self.membership_type = membership_type
        self.expiry_date = parse_datetime(expiry_date)
        self.status = status
        self.join_date = parse_datetime(join_date)
        self.profile_picture = profile_picture
        self.created_at = created_at
        self.updated_at = updated_at

        # filled by list queries
        self.counts = None

    @classmethod
    def _db_path(cls):
        return current_app.config.get('DATABASE_PATH', 'gym_admin.db')

    @classmethod
    def _from_row(cls, row):
        if not row:
            return None
        member = cls(
            id=row['id'], name=row['name'], age=row['age'], gender=row['gender'],
            email=row['email'], phone=row['phone'], membership_type=row['membership_type'],
            expiry_date=row['expiry_date'], status=row['status'], join_date=row['join_date'],
            profile_picture=row['profile_picture'], created_at=row['created_at'],
            updated_at=row['updated_at']
        )
        if 'check_in_count' in row.keys():
            member.counts = {
                'checkIns': row['check_in_count'],
                'payments': row['payment_count'],
                'workouts': row['workout_count'],
            }
        return member

    # -------------------- Status --------------------

    def effective_status(self, now=None):
        return derive_status(self.expiry_date, now or utcnow(), self.status)

    @property
    def is_archived(self):
        return self.status == MemberStatus.ARCHIVED.value

    def set_expiry_date(self, expiry_date, now=None):
        """Change the expiry date and re-derive status (archived stays archived)."""
        self.expiry_date = expiry_date
        self.status = derive_status(expiry_date, now or utcnow(), self.status).value

    def archive(self):
        """Soft delete: move to ARCHIVED and persist."""
        self.status = archive(self.status).value
        self.save()
        current_app.logger.info("Archived member %s", self.id)
        return self

    def restore(self, now=None):
        """Explicit admin un-archive; status is re-derived from the expiry date."""
        new_status = restore(self.status, self.expiry_date, now or utcnow())
        self._ensure_email_available(self.email)
        self.status = new_status.value
        self.save()
        current_app.logger.info("Restored member %s as %s", self.id, self.status)
        return self

    # -------------------- Fetchers --------------------

    @classmethod
    def get_by_id(cls, member_id):
        query = f'SELECT {MEMBER_COLUMNS} FROM members m WHERE m.id = ? LIMIT 1'
        rows = execute_query(query, (member_id,), cls._db_path(), fetch=True)
        return cls._from_row(rows[0]) if rows else None

    @classmethod
    def get_by_email(cls, email):
        """Non-archived member holding `email` (emails are stored lower-cased)."""
        query = f'''SELECT {MEMBER_COLUMNS} FROM members m
                    WHERE m.email = ? AND m.status != 'ARCHIVED' LIMIT 1'''
        rows = execute_query(query, (email.strip().lower(),), cls._db_path(), fetch=True)
        return cls._from_row(rows[0]) if rows else None

    @classmethod
    def search(cls, member_filter, page=1, limit=10, sort_column='m.name', sort_order='ASC',
               now=None):
        """
        Paginated member list.
        Returns (members, total) where members carry `counts` of related rows.
        """
        db_path = cls._db_path()
        now = now or utcnow()
        where, params = member_filter.to_sql(now)

        total = fetch_scalar(f'SELECT COUNT(*) FROM members m WHERE {where}', tuple(params), db_path)

        query = f'''
            SELECT {MEMBER_COLUMNS}, {COUNT_COLUMNS},
                CASE
                    WHEN m.status = 'ARCHIVED' THEN 'ARCHIVED'
                    WHEN m.expiry_date <= ? THEN 'INACTIVE'
                    WHEN m.expiry_date <= ? THEN 'EXPIRING_SOON'
                    ELSE 'ACTIVE'
                END AS effective_status
            FROM members m
            WHERE {where}
            ORDER BY {sort_column} {sort_order}, m.id ASC
            LIMIT ? OFFSET ?
        '''
        status_params = [to_db_timestamp(now), to_db_timestamp(now + EXPIRING_WINDOW)]
        rows = execute_query(
            query, tuple(status_params + list(params) + [limit, (page - 1) * limit]),
            db_path, fetch=True
        )
        return [cls._from_row(r) for r in rows], total

    def get_stats(self):
        """Totals across this member's check-ins, payments and workouts."""
        db_path = self._db_path()
        payment_row = execute_query(
            '''SELECT COUNT(*) AS payment_count,
                      COALESCE(SUM(CASE WHEN status = 'PAID' THEN amount END), 0) AS total_paid
               FROM payments WHERE member_id = ?''',
            (self.id,), db_path, fetch=True
        )[0]
        workout_row = execute_query(
            '''SELECT COUNT(*) AS workout_count,
                      COALESCE(SUM(duration), 0) AS total_duration,
                      COALESCE(SUM(calories), 0) AS total_calories
               FROM workouts WHERE member_id = ?''',
            (self.id,), db_path, fetch=True
        )[0]
        return {
            'checkInCount': fetch_scalar('SELECT COUNT(*) FROM check_ins WHERE member_id = ?',
                                         (self.id,), db_path),
            'paymentCount': payment_row['payment_count'],
            'totalPaid': round(float(payment_row['total_paid']), 2),
            'workoutCount': workout_row['workout_count'],
            'totalWorkoutDuration': workout_row['total_duration'],
            'totalCalories': workout_row['total_calories'],
        }

    def get_recent_history(self, limit=10):
        return {
            'checkIns': [c.to_dict() for c in CheckIn.get_for_member(self.id, limit=limit)],
            'payments': [p.to_dict() for p in Payment.get_for_member(self.id, limit=limit)],
            'workouts': [w.to_dict() for w in Workout.get_for_member(self.id, limit=limit)],
        }

    # -------------------- Create / update --------------------

    def _ensure_email_available(self, email):
        other = Member.get_by_email(email)
        if other and other.id != self.id:
            raise ConflictError('Member with this email already exists')

    @classmethod
    def create(cls, data, now=None):
        """Build, derive status and insert a member from validated fields."""
        now = now or utcnow()
        member = cls(**{k: v for k, v in data.items() if k != 'expiry_date'})
        member.join_date = data.get('join_date') or now
        expiry = data.get('expiry_date')
        if expiry is None:
            months = MembershipType(member.membership_type).months
            try:
                expiry = calculate_expiry_date(member.join_date, months)
            except (ValueError, OverflowError):
                raise BadRequestError('Invalid join date')
        member._ensure_email_available(member.email)
        member.status = MemberStatus.ACTIVE.value
        member.set_expiry_date(expiry, now)
        member.save()
        current_app.logger.info("Created member %s (%s)", member.id, member.status)
        return member

    def apply_update(self, data, now=None):
        """Apply validated partial fields; status changes go through the state machine."""
        now = now or utcnow()
        if 'email' in data and data['email'] != self.email and not self.is_archived:
            self._ensure_email_available(data['email'])
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(self, field, data[field])
        if 'expiry_date' in data:
            self.set_expiry_date(data['expiry_date'], now)

        requested = data.get('status')
        if requested == MemberStatus.ARCHIVED.value:
            self.status = archive(self.status).value
        elif requested is not None and self.is_archived:
            self._ensure_email_available(self.email)
            self.status = restore(self.status, self.expiry_date, now).value
        self.save()
        return self

    # -------------------- Persistence --------------------

    def save(self):
        """Insert or update the member row."""
        db_path = self._db_path()
        stamp = to_db_timestamp(utcnow())
        params = (
            self.name, self.age, self.gender, self.email, self.phone, self.membership_type,
            to_db_timestamp(self.expiry_date), self.status, to_db_timestamp(self.join_date),
            self.profile_picture
        )
        if self.id:
            query = '''
                UPDATE members
                SET name = ?, age = ?, gender = ?, email = ?, phone = ?, membership_type = ?,
                    expiry_date = ?, status = ?, join_date = ?, profile_picture = ?,
                    updated_at = ?
                WHERE id = ?
            '''
            execute_query(query, params + (stamp, self.id), db_path)
            self.updated_at = stamp
            return self.id

        query = '''
            INSERT INTO members (
                name, age, gender, email, phone, membership_type,
                expiry_date, status, join_date, profile_picture, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        '''
        self.id = execute_query(query, params + (stamp, stamp), db_path)
        self.created_at = self.updated_at = stamp
        return self.id

    def to_dict(self, now=None):
        data = {
            'id': self.id,
            'name': self.name,
            'age': self.age,
            'gender': self.gender,
            'email': self.email,
            'phone': self.phone,
            'membershipType': self.membership_type,
            'expiryDate': to_api_timestamp(self.expiry_date),
            'status': self.effective_status(now).value,
            'profilePicture': self.profile_picture,
            'joinDate': to_api_timestamp(self.join_date),
            'createdAt': to_api_timestamp(self.created_at),
            'updatedAt': to_api_timestamp(self.updated_at),
        }
        if self.counts is not None:
            data['_count'] = self.counts
        return data
