from flask import current_app

from gymadmin.utils.helpers import to_api_timestamp

from .database import _get_bcrypt, execute_query

USER_COLUMNS = 'id, email, password_hash, name, role, is_active, created_at, updated_at'


class User:
    ROLES = ['ADMIN', 'SUPER_ADMIN']

    def __init__(self, id=None, email=None, password_hash=None, name=None,
                 role='ADMIN', is_active=True, created_at=None, updated_at=None):
        self.id = id
        self.email = email
        self.password_hash = password_hash
        self.name = name
        self.role = role
        self.is_active = is_active
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def _db_path(cls):
        return current_app.config.get('DATABASE_PATH', 'gym_admin.db')

    @classmethod
    def _from_row(cls, row):
        if not row:
            return None
        return cls(
            id=row['id'], email=row['email'], password_hash=row['password_hash'],
            name=row['name'], role=row['role'], is_active=bool(row['is_active']),
            created_at=row['created_at'], updated_at=row['updated_at']
        )

    @classmethod
    def authenticate(cls, email, password):
        """Return the active user matching email/password, or None."""
        user = cls.get_by_email(email)
        if not user or not user.is_active or not user.password_hash:
            return None
        try:
            if _get_bcrypt().check_password_hash(user.password_hash, password):
                return user
        except ValueError:
            # stored hash in an unexpected format
            current_app.logger.warning("Unreadable password hash for user %s", user.id)
        return None

    @classmethod
    def get_by_id(cls, user_id):
        """Get user by ID"""
        if user_id is None:
            return None
        query = f'SELECT {USER_COLUMNS} FROM users WHERE id = ?'
        rows = execute_query(query, (user_id,), cls._db_path(), fetch=True)
        return cls._from_row(rows[0]) if rows else None

    @classmethod
    def get_by_email(cls, email):
        query = f'SELECT {USER_COLUMNS} FROM users WHERE email = ?'
        rows = execute_query(query, (email.strip().lower(),), cls._db_path(), fetch=True)
        return cls._from_row(rows[0]) if rows else None

    def set_password(self, password):
        hashed = _get_bcrypt().generate_password_hash(password)
        if isinstance(hashed, bytes):
            hashed = hashed.decode('utf-8')
        self.password_hash = hashed

    def save(self):
        """Insert or update the user row."""
        db_path = self._db_path()
        self.email = self.email.strip().lower()
        if self.id:
            query = '''UPDATE users SET email = ?, password_hash = ?, name = ?, role = ?,
                       is_active = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?'''
            execute_query(query, (self.email, self.password_hash, self.name, self.role,
                                  int(self.is_active), self.id), db_path)
            return self.id

        query = '''INSERT INTO users (email, password_hash, name, role, is_active)
                   VALUES (?, ?, ?, ?, ?)'''
        self.id = execute_query(query, (self.email, self.password_hash, self.name,
                                        self.role, int(self.is_active)), db_path)
        return self.id

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'isActive': self.is_active,
            'createdAt': to_api_timestamp(self.created_at),
            'updatedAt': to_api_timestamp(self.updated_at),
        }
