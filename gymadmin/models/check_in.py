from flask import current_app

from gymadmin.utils.helpers import parse_datetime, to_api_timestamp, to_db_timestamp, utcnow

from .database import execute_query, fetch_scalar

CHECK_IN_COLUMNS = '''
    c.id, c.member_id, c.check_in_at,
    mb.name AS member_name, mb.profile_picture AS member_profile_picture
'''

CHECK_IN_FROM = 'check_ins c LEFT JOIN members mb ON mb.id = c.member_id'


class CheckIn:
    """A member's visit to the gym."""

    def __init__(self, id=None, member_id=None, check_in_at=None):
        self.id = id
        self.member_id = member_id
        self.check_in_at = parse_datetime(check_in_at)
        self.member = None

    @classmethod
    def _db_path(cls):
        return current_app.config.get('DATABASE_PATH', 'gym_admin.db')

    @classmethod
    def _from_row(cls, row):
        if not row:
            return None
        check_in = cls(id=row['id'], member_id=row['member_id'], check_in_at=row['check_in_at'])
        if row['member_name'] is not None:
            check_in.member = {
                'id': row['member_id'],
                'name': row['member_name'],
                'profilePicture': row['member_profile_picture'],
            }
        return check_in

    @classmethod
    def get_for_member(cls, member_id, limit=10):
        query = f'''SELECT {CHECK_IN_COLUMNS} FROM {CHECK_IN_FROM}
                    WHERE c.member_id = ? ORDER BY c.check_in_at DESC, c.id DESC LIMIT ?'''
        rows = execute_query(query, (member_id, limit), cls._db_path(), fetch=True)
        return [cls._from_row(r) for r in rows]

    @classmethod
    def get_recent(cls, limit=20):
        query = f'''SELECT {CHECK_IN_COLUMNS} FROM {CHECK_IN_FROM}
                    ORDER BY c.check_in_at DESC, c.id DESC LIMIT ?'''
        rows = execute_query(query, (limit,), cls._db_path(), fetch=True)
        return [cls._from_row(r) for r in rows]

    @classmethod
    def search(cls, member_id=None, page=1, limit=10):
        db_path = cls._db_path()
        where, params = '1 = 1', ()
        if member_id is not None:
            where, params = 'c.member_id = ?', (member_id,)
        total = fetch_scalar(f'SELECT COUNT(*) FROM check_ins c WHERE {where}', params, db_path)
        query = f'''SELECT {CHECK_IN_COLUMNS} FROM {CHECK_IN_FROM} WHERE {where}
                    ORDER BY c.check_in_at DESC, c.id DESC LIMIT ? OFFSET ?'''
        rows = execute_query(query, params + (limit, (page - 1) * limit), db_path, fetch=True)
        return [cls._from_row(r) for r in rows], total

    @classmethod
    def record(cls, member_id, check_in_at=None):
        check_in = cls(member_id=member_id, check_in_at=check_in_at or utcnow())
        check_in.id = execute_query(
            'INSERT INTO check_ins (member_id, check_in_at) VALUES (?, ?)',
            (member_id, to_db_timestamp(check_in.check_in_at)), cls._db_path()
        )
        return check_in

    def to_dict(self):
        data = {
            'id': self.id,
            'memberId': self.member_id,
            'checkInAt': to_api_timestamp(self.check_in_at),
        }
        if self.member is not None:
            data['member'] = self.member
        return data
