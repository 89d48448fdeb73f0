"""
User store: SQLite-backed user documents.

Uses parameterized queries exclusively. Username and email uniqueness is
enforced by UNIQUE constraints, so a signup that loses a race against
another signup fails at insert time with DuplicateUserError.

Connections live on Flask's g object for the duration of a request and
are closed by close_db on teardown.
"""

import json
import os
import sqlite3
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from flask import current_app, g


class UserStoreError(Exception):
    """The user store could not complete an operation."""


class DuplicateUserError(UserStoreError):
    """A write violated the username or email uniqueness constraint."""


@dataclass(frozen=True)
class User:
    id: int
    username: str
    email: str
    password_hash: str
    name: str
    borough: Optional[str]
    location: Optional[Dict[str, Any]]
    profile_picture: str
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> 'User':
        location = json.loads(row['location']) if row['location'] else None
        return cls(
            id=row['id'],
            username=row['username'],
            email=row['email'],
            password_hash=row['password_hash'],
            name=row['name'],
            borough=row['borough'],
            location=location,
            profile_picture=row['profile_picture'],
            created_at=row['created_at'],
        )

    def public_view(self) -> Dict[str, Any]:
        """Every field except the password hash, for sessions and templates."""
        data = asdict(self)
        del data['password_hash']
        return data


def make_location(latitude: Optional[float], longitude: Optional[float]) -> Optional[Dict[str, Any]]:
    """Fold a latitude/longitude pair into a GeoJSON point (longitude first)."""
    if latitude is None or longitude is None:
        return None
    return {'type': 'Point', 'coordinates': [float(longitude), float(latitude)]}


def resolve_database_path(app) -> str:
    """
    Turn DATABASE_URI into a filesystem path.

    Only the sqlite:/// scheme is supported; relative paths land in the
    instance folder.
    """
    uri = app.config['DATABASE_URI']
    prefix = 'sqlite:///'
    if not uri.startswith(prefix):
        raise UserStoreError(f'Unsupported DATABASE_URI scheme: {uri!r}')
    path = uri[len(prefix):]
    if path == ':memory:' or os.path.isabs(path):
        return path
    return os.path.join(app.instance_path, path)


def _connect(path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def get_db() -> sqlite3.Connection:
    """Get (or open) the database connection for the current request."""
    if 'db' not in g:
        try:
            g.db = _connect(resolve_database_path(current_app))
            g.db.execute('PRAGMA journal_mode=WAL')
        except sqlite3.Error as e:
            raise UserStoreError(f'Could not open user database: {e}') from e
    return g.db


def close_db(exception=None) -> None:
    """Close the database connection at the end of the request."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db(app) -> None:
    """Create the users table. Safe to call on every startup."""
    conn = _connect(resolve_database_path(app))
    try:
        conn.execute('''
            CREATE TABLE IF NOT EXISTS users (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                username        TEXT UNIQUE NOT NULL,
                email           TEXT UNIQUE NOT NULL COLLATE NOCASE,
                password_hash   TEXT NOT NULL,
                name            TEXT NOT NULL,
                borough         TEXT,
                location        TEXT,
                profile_picture TEXT NOT NULL,
                created_at      TEXT NOT NULL DEFAULT (datetime('now'))
            )
        ''')
        conn.commit()
    finally:
        conn.close()


_USER_COLUMNS = (
    'id, username, email, password_hash, name, borough, location, '
    'profile_picture, created_at'
)


def _fetch_one(query: str, params: tuple) -> Optional[User]:
    try:
        row = get_db().execute(query, params).fetchone()
    except sqlite3.Error as e:
        raise UserStoreError(f'User lookup failed: {e}') from e
    return User.from_row(row) if row is not None else None


def find_user_by_id(user_id: int) -> Optional[User]:
    return _fetch_one(f'SELECT {_USER_COLUMNS} FROM users WHERE id = ?', (user_id,))


def find_user_by_username(username: str) -> Optional[User]:
    return _fetch_one(f'SELECT {_USER_COLUMNS} FROM users WHERE username = ?', (username,))


def find_user_by_username_or_email(username: str, email: str) -> Optional[User]:
    """Return any user holding this username or this email (case-insensitive)."""
    return _fetch_one(
        f'SELECT {_USER_COLUMNS} FROM users WHERE username = ? OR email = ? LIMIT 1',
        (username, email),
    )


def create_user(
    username: str,
    email: str,
    password_hash: str,
    name: str,
    borough: Optional[str] = None,
    location: Optional[Dict[str, Any]] = None,
    profile_picture: Optional[str] = None,
) -> User:
    """
    Insert a new user and return it.

    Raises:
        DuplicateUserError: username or email is already taken.
        UserStoreError: any other database failure.
    """
    if profile_picture is None:
        profile_picture = current_app.config['DEFAULT_PROFILE_PICTURE']

    db = get_db()
    try:
        cursor = db.execute(
            '''INSERT INTO users
                   (username, email, password_hash, name, borough, location, profile_picture)
               VALUES (?, ?, ?, ?, ?, ?, ?)''',
            (
                username,
                email,
                password_hash,
                name,
                borough,
                json.dumps(location) if location is not None else None,
                profile_picture,
            ),
        )
        db.commit()
    except sqlite3.IntegrityError as e:
        db.rollback()
        raise DuplicateUserError('Username or email already taken') from e
    except sqlite3.Error as e:
        db.rollback()
        raise UserStoreError(f'Could not create user: {e}') from e

    return find_user_by_id(cursor.lastrowid)


_UPDATABLE_FIELDS = ('name', 'borough', 'location', 'profile_picture')


def update_user(user_id: int, **changes) -> Optional[User]:
    """
    Update profile fields of a user and return the stored result.

    Only name, borough, location and profile_picture can change.
    Returns None if the user does not exist.
    """
    unknown = set(changes) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f'Cannot update field(s): {", ".join(sorted(unknown))}')
    if not changes:
        return find_user_by_id(user_id)

    if 'location' in changes and changes['location'] is not None:
        changes['location'] = json.dumps(changes['location'])

    columns = sorted(changes)
    assignments = ', '.join(f'{column} = ?' for column in columns)
    params = tuple(changes[column] for column in columns) + (user_id,)

    db = get_db()
    try:
        db.execute(f'UPDATE users SET {assignments} WHERE id = ?', params)
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise UserStoreError(f'Could not update user: {e}') from e

    return find_user_by_id(user_id)
