from enum import Enum

from flask import current_app

from gymadmin.utils.errors import BadRequestError
from gymadmin.utils.helpers import (
    parse_datetime, start_of_month, to_api_timestamp, to_db_timestamp, utcnow,
)

from .database import execute_query, fetch_scalar


class PaymentStatus(str, Enum):
    PENDING = 'PENDING'
    PAID = 'PAID'
    OVERDUE = 'OVERDUE'
    CANCELLED = 'CANCELLED'


class PaymentType(str, Enum):
    MEMBERSHIP = 'MEMBERSHIP'
    PERSONAL_TRAINING = 'PERSONAL_TRAINING'
    CLASS = 'CLASS'
    OTHER = 'OTHER'


PAYMENT_COLUMNS = '''
    p.id, p.member_id, p.amount, p.payment_type, p.status, p.due_date, p.paid_at,
    p.notes, p.created_at, p.updated_at,
    mb.name AS member_name, mb.email AS member_email, mb.phone AS member_phone,
    mb.profile_picture AS member_profile_picture
'''

PAYMENT_FROM = 'payments p LEFT JOIN members mb ON mb.id = p.member_id'

SORT_FIELDS = {
    'createdAt': 'p.created_at',
    'dueDate': 'p.due_date',
    'amount': 'p.amount',
    'status': 'p.status',
}

UPDATABLE_FIELDS = ('amount', 'payment_type', 'due_date', 'notes')


class Payment:
    def __init__(self, id=None, member_id=None, amount=None, payment_type=None,
                 status=PaymentStatus.PENDING.value, due_date=None, paid_at=None,
                 notes=None, created_at=None, updated_at=None):
        self.id = id
        self.member_id = member_id
        self.amount = amount
        self.payment_type = payment_type
        self.status = status
        self.due_date = parse_datetime(due_date)
        self.paid_at = parse_datetime(paid_at)
        self.notes = notes
        self.created_at = created_at
        self.updated_at = updated_at

        # member summary from the joined row
        self.member = None

    @classmethod
    def _db_path(cls):
        return current_app.config.get('DATABASE_PATH', 'gym_admin.db')

    @classmethod
    def _from_row(cls, row):
        if not row:
            return None
        payment = cls(
            id=row['id'], member_id=row['member_id'], amount=row['amount'],
            payment_type=row['payment_type'], status=row['status'], due_date=row['due_date'],
            paid_at=row['paid_at'], notes=row['notes'], created_at=row['created_at'],
            updated_at=row['updated_at']
        )
        if row['member_name'] is not None:
            payment.member = {
                'id': row['member_id'],
                'name': row['member_name'],
                'email': row['member_email'],
                'phone': row['member_phone'],
                'profilePicture': row['member_profile_picture'],
            }
        return payment

    # -------------------- Fetchers --------------------

    @classmethod
    def get_by_id(cls, payment_id):
        query = f'SELECT {PAYMENT_COLUMNS} FROM {PAYMENT_FROM} WHERE p.id = ? LIMIT 1'
        rows = execute_query(query, (payment_id,), cls._db_path(), fetch=True)
        return cls._from_row(rows[0]) if rows else None

    @classmethod
    def get_for_member(cls, member_id, limit=10):
        """Most recent payments of one member, newest first."""
        query = f'''SELECT {PAYMENT_COLUMNS} FROM {PAYMENT_FROM}
                    WHERE p.member_id = ? ORDER BY p.created_at DESC, p.id DESC LIMIT ?'''
        rows = execute_query(query, (member_id, limit), cls._db_path(), fetch=True)
        return [cls._from_row(r) for r in rows]

    @classmethod
    def search(cls, member_id=None, status=None, payment_type=None, page=1, limit=10,
               sort_column='p.created_at', sort_order='DESC'):
        """Filtered, paginated payments. Returns (payments, total)."""
        db_path = cls._db_path()
        clauses, params = [], []
        if member_id is not None:
            clauses.append('p.member_id = ?')
            params.append(member_id)
        if status:
            clauses.append('p.status = ?')
            params.append(status)
        if payment_type:
            clauses.append('p.payment_type = ?')
            params.append(payment_type)
        where = ' AND '.join(clauses) or '1 = 1'

        total = fetch_scalar(f'SELECT COUNT(*) FROM payments p WHERE {where}', tuple(params), db_path)
        query = f'''
            SELECT {PAYMENT_COLUMNS} FROM {PAYMENT_FROM}
            WHERE {where}
            ORDER BY {sort_column} {sort_order}, p.id DESC
            LIMIT ? OFFSET ?
        '''
        rows = execute_query(query, tuple(params) + (limit, (page - 1) * limit), db_path, fetch=True)
        return [cls._from_row(r) for r in rows], total

    @classmethod
    def get_recent(cls, limit=20):
        query = f'''SELECT {PAYMENT_COLUMNS} FROM {PAYMENT_FROM}
                    ORDER BY p.created_at DESC, p.id DESC LIMIT ?'''
        rows = execute_query(query, (limit,), cls._db_path(), fetch=True)
        return [cls._from_row(r) for r in rows]

    @classmethod
    def get_overview(cls, now=None):
        """Counts, revenue totals and the type distribution of non-cancelled payments."""
        db_path = cls._db_path()
        now = now or utcnow()
        counts = execute_query(
            '''SELECT COUNT(*) AS total,
                      COALESCE(SUM(status = 'PENDING'), 0) AS pending,
                      COALESCE(SUM(status = 'OVERDUE'), 0) AS overdue,
                      COALESCE(SUM(CASE WHEN status = 'PAID' THEN amount END), 0) AS revenue
               FROM payments''',
            (), db_path, fetch=True
        )[0]
        monthly = fetch_scalar(
            "SELECT SUM(amount) FROM payments WHERE status = 'PAID' AND paid_at >= ?",
            (to_db_timestamp(start_of_month(now)),), db_path
        )
        rows = execute_query(
            '''SELECT payment_type, COUNT(*) AS count FROM payments
               WHERE status != 'CANCELLED' GROUP BY payment_type ORDER BY payment_type''',
            (), db_path, fetch=True
        )
        return {
            'totalPayments': counts['total'],
            'pendingPayments': counts['pending'],
            'overduePayments': counts['overdue'],
            'totalRevenue': round(float(counts['revenue']), 2),
            'monthlyRevenue': round(float(monthly), 2),
            'paymentTypeDistribution': [
                {'type': r['payment_type'], 'count': r['count']} for r in rows
            ],
        }

    # -------------------- Lifecycle --------------------

    @classmethod
    def create(cls, data, now=None):
        """New payments start PENDING, or OVERDUE when already past due."""
        now = now or utcnow()
        payment = cls(
            member_id=data['member_id'], amount=data['amount'],
            payment_type=data['payment_type'], due_date=data['due_date'],
            notes=data.get('notes')
        )
        if payment.due_date < now:
            payment.status = PaymentStatus.OVERDUE.value
        payment.save()
        return payment

    def _set_status(self, status, now):
        if status == PaymentStatus.PAID.value:
            if self.status != PaymentStatus.PAID.value:
                self.paid_at = now
        else:
            self.paid_at = None
        self.status = status

    def apply_update(self, data, now=None):
        now = now or utcnow()
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(self, field, data[field])
        if 'status' in data:
            self._set_status(data['status'], now)
        if ('due_date' in data and self.due_date < now
                and self.status == PaymentStatus.PENDING.value):
            self.status = PaymentStatus.OVERDUE.value
        self.save()
        return self

    def mark_paid(self, notes=None, now=None):
        if self.status == PaymentStatus.PAID.value:
            raise BadRequestError('Payment is already marked as paid')
        self._set_status(PaymentStatus.PAID.value, now or utcnow())
        if notes:
            self.notes = notes
        self.save()
        current_app.logger.info("Payment %s marked as paid", self.id)
        return self

    def delete(self):
        if self.status != PaymentStatus.PENDING.value:
            raise BadRequestError('Only pending payments can be deleted')
        execute_query('DELETE FROM payments WHERE id = ?', (self.id,), self._db_path())

    def save(self):
        """Insert or update the payment row."""
        db_path = self._db_path()
        stamp = to_db_timestamp(utcnow())
        params = (self.member_id, self.amount, self.payment_type, self.status,
                  to_db_timestamp(self.due_date), to_db_timestamp(self.paid_at), self.notes)
        if self.id:
            query = '''UPDATE payments
                       SET member_id = ?, amount = ?, payment_type = ?, status = ?,
                           due_date = ?, paid_at = ?, notes = ?, updated_at = ?
                       WHERE id = ?'''
            execute_query(query, params + (stamp, self.id), db_path)
            self.updated_at = stamp
            return self.id

        query = '''INSERT INTO payments (member_id, amount, payment_type, status, due_date,
                                         paid_at, notes, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)'''
        self.id = execute_query(query, params + (stamp, stamp), db_path)
        self.created_at = self.updated_at = stamp
        return self.id

    def to_dict(self):
        data = {
            'id': self.id,
            'memberId': self.member_id,
            'amount': round(float(self.amount), 2),
            'paymentType': self.payment_type,
            'status': self.status,
            'dueDate': to_api_timestamp(self.due_date),
            'paidAt': to_api_timestamp(self.paid_at),
            'notes': self.notes,
            'createdAt': to_api_timestamp(self.created_at),
            'updatedAt': to_api_timestamp(self.updated_at),
        }
        if self.member is not None:
            data['member'] = self.member
        return data
