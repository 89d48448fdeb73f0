"""
Password hashing: bcrypt through flask-bcrypt.

The work factor comes from BCRYPT_LOG_ROUNDS. verify_credentials always
runs exactly one bcrypt comparison: unknown usernames are checked
against a dummy hash so that response time does not reveal whether an
account exists.
"""

from typing import Optional

from houseofplants.extensions import bcrypt

DUMMY_HASH: Optional[str] = None


def init_dummy_hash(app) -> None:
    """Pre-compute the dummy hash with the app's work factor."""
    global DUMMY_HASH
    with app.app_context():
        DUMMY_HASH = hash_password('not-a-real-password-for-timing')


def hash_password(password: str) -> str:
    """Salted bcrypt hash of a plaintext password."""
    return bcrypt.generate_password_hash(password).decode('utf-8')


def check_password(password_hash: str, password: str) -> bool:
    return bcrypt.check_password_hash(password_hash, password)


def verify_credentials(user, password: str) -> bool:
    """
    Check a password for a possibly missing user in constant time.

    Args:
        user: The stored user, or None when the username is unknown.
        password: Plaintext password from the login form.

    Returns:
        True only for an existing user with a matching password. Callers
        must not tell the two failure cases apart.
    """
    if user is None:
        check_password(DUMMY_HASH, password)
        return False
    return check_password(user.password_hash, password)
