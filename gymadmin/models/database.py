import logging
import sqlite3

from flask import current_app, has_app_context
from flask_bcrypt import Bcrypt

logger = logging.getLogger(__name__)


def _casefold(value):
    """SQL-side twin of str.casefold so search filters agree with Python."""
    if value is None:
        return None
    return str(value).casefold()


def get_db_connection(db_path='gym_admin.db'):
    """Get database connection with row factory, FK enabled and CASEFOLD() registered"""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.create_function("CASEFOLD", 1, _casefold, deterministic=True)
    return conn


def execute_query(query, params=(), db_path='gym_admin.db', fetch=False):
    """Execute a database query with optional parameters"""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(query, params)
        if fetch:
            return cursor.fetchall()
        conn.commit()
        return cursor.lastrowid
    except sqlite3.Error as e:
        # release the write lock before the error propagates
        conn.rollback()
        log = current_app.logger if has_app_context() else logger
        log.error("DB Error: %s | Query: %s | Params: %s", e, query, params)
        raise
    finally:
        cursor.close()
        conn.close()


def fetch_scalar(query, params=(), db_path='gym_admin.db', default=0):
    """Run a single-value SELECT (COUNT/SUM/...) and return its value or `default`."""
    rows = execute_query(query, params, db_path, fetch=True)
    if not rows or rows[0][0] is None:
        return default
    return rows[0][0]


def _get_bcrypt():
    """Return a Bcrypt instance bound to the current app (call inside app context)."""
    return getattr(current_app, 'bcrypt', None) or Bcrypt(current_app)


def init_db(db_path='gym_admin.db'):
    """Initialize database with all required tables"""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    # Admin accounts
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            name TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'ADMIN' CHECK (role IN ('ADMIN', 'SUPER_ADMIN')),
            is_active BOOLEAN DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS members (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            age INTEGER NOT NULL CHECK (age BETWEEN 16 AND 100),
            gender TEXT NOT NULL CHECK (gender IN ('MALE', 'FEMALE', 'OTHER')),
            email TEXT NOT NULL,
            phone TEXT NOT NULL,
            membership_type TEXT NOT NULL
                CHECK (membership_type IN ('ONE_MONTH', 'THREE_MONTH', 'SIX_MONTH', 'ONE_YEAR')),
            expiry_date TIMESTAMP NOT NULL,
            status TEXT NOT NULL DEFAULT 'ACTIVE'
                CHECK (status IN ('ACTIVE', 'INACTIVE', 'EXPIRING_SOON', 'ARCHIVED')),
            join_date TIMESTAMP NOT NULL,
            profile_picture TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')
    # Email is unique among members that are not archived
    cursor.execute('''
        CREATE UNIQUE INDEX IF NOT EXISTS ux_members_email_live
        ON members (email) WHERE status != 'ARCHIVED'
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS payments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            member_id INTEGER NOT NULL,
            amount DECIMAL(10,2) NOT NULL CHECK (amount > 0),
            payment_type TEXT NOT NULL
                CHECK (payment_type IN ('MEMBERSHIP', 'PERSONAL_TRAINING', 'CLASS', 'OTHER')),
            status TEXT NOT NULL DEFAULT 'PENDING'
                CHECK (status IN ('PENDING', 'PAID', 'OVERDUE', 'CANCELLED')),
            due_date TIMESTAMP NOT NULL,
            paid_at TIMESTAMP,
            notes TEXT,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP,
            CHECK ((status = 'PAID') = (paid_at IS NOT NULL)),
            FOREIGN KEY (member_id) REFERENCES members (id)
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS workouts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            member_id INTEGER NOT NULL,
            workout_type TEXT NOT NULL
                CHECK (workout_type IN ('CARDIO', 'STRENGTH', 'FLEXIBILITY', 'SPORTS', 'OTHER')),
            duration INTEGER NOT NULL CHECK (duration >= 1),
            calories INTEGER CHECK (calories IS NULL OR calories >= 0),
            notes TEXT,
            workout_at TIMESTAMP NOT NULL,
            created_at TIMESTAMP NOT NULL,
            FOREIGN KEY (member_id) REFERENCES members (id)
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS check_ins (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            member_id INTEGER NOT NULL,
            check_in_at TIMESTAMP NOT NULL,
            FOREIGN KEY (member_id) REFERENCES members (id)
        )
    ''')

    cursor.execute('CREATE INDEX IF NOT EXISTS ix_payments_member ON payments (member_id)')
    cursor.execute('CREATE INDEX IF NOT EXISTS ix_workouts_member ON workouts (member_id)')
    cursor.execute('CREATE INDEX IF NOT EXISTS ix_check_ins_member ON check_ins (member_id)')

    conn.commit()
    conn.close()


def seed_default_admin(db_path, email, password, name='Administrator'):
    """
    Create the first ADMIN account if no user with `email` exists yet.
    Must run inside an app context (hashing goes through the app's Bcrypt).
    Returns the new user id, or None when the account was already there.
    """
    email = email.strip().lower()
    existing = execute_query('SELECT id FROM users WHERE email = ?', (email,), db_path, fetch=True)
    if existing:
        return None

    hashed = _get_bcrypt().generate_password_hash(password)
    if isinstance(hashed, bytes):
        hashed = hashed.decode('utf-8')
    user_id = execute_query(
        "INSERT INTO users (email, password_hash, name, role) VALUES (?, ?, ?, 'ADMIN')",
        (email, hashed, name), db_path
    )
    current_app.logger.info("Seeded default admin account %s", email)
    return user_id
