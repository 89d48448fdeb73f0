"""
Application configuration.

Deployment-specific values (secret key, database connection string,
SMTP settings) come from environment variables; everything else lives
here as class attributes.
"""

import os
import secrets


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class BaseConfig:
    """Shared configuration for all environments."""

    # --- Flask Core ---
    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_hex(32)

    # Signup form with location fields is well under 2KB.
    MAX_CONTENT_LENGTH = 16 * 1024  # 16KB

    # --- Session Configuration (flask-session) ---
    # Server-side sessions; the cookie only carries an opaque ID. The
    # cachelib store itself (SESSION_CACHELIB) is set up by the app factory
    # inside the instance folder.
    SESSION_TYPE = 'cachelib'
    SESSION_PERMANENT = True
    PERMANENT_SESSION_LIFETIME = 60 * 60 * 24 * 7  # one week, refreshed per request
    SESSION_KEY_PREFIX = 'hop-session:'

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_NAME = 'session'

    # --- bcrypt ---
    BCRYPT_LOG_ROUNDS = 12
    # SHA-256 pre-hash so passwords past bcrypt's 72-byte limit are accepted.
    BCRYPT_HANDLE_LONG_PASSWORDS = True

    # --- Password Policy ---
    PASSWORD_MIN_LENGTH = 8
    # Legacy accounts created before the 8-character rule cannot log in
    # while this is on.
    LOGIN_ENFORCE_PASSWORD_LENGTH = True

    # --- Rate Limiting (flask-limiter) ---
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = 'memory://'
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_DEFAULT = '300/hour'
    LOGIN_RATE_LIMIT_IP = '10/minute'
    SIGNUP_RATE_LIMIT_IP = '20/hour'

    # --- Database ---
    # sqlite:///relative/path is resolved inside the instance folder.
    DATABASE_URI = os.environ.get('DATABASE_URI', 'sqlite:///houseofplants.db')

    # --- Users ---
    DEFAULT_PROFILE_PICTURE = '/images/default-profile-picture.png'

    # --- Mail ---
    MAIL_ENABLED = _env_flag('MAIL_ENABLED', False)
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', '587'))
    MAIL_USE_TLS = _env_flag('MAIL_USE_TLS', True)
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_SENDER = os.environ.get(
        'MAIL_SENDER', 'House of Plants <houseofplants.ih@gmail.com>'
    )
    MAIL_TIMEOUT = 10  # seconds


class ProductionConfig(BaseConfig):
    """Production environment."""

    DEBUG = False
    TESTING = False

    # Never fall back to a random key: it would log everyone out on restart.
    SECRET_KEY = os.environ.get('SECRET_KEY')

    SESSION_COOKIE_SECURE = True

    PROXY_COUNT = int(os.environ.get('PROXY_COUNT', '1'))

    @classmethod
    def init_app(cls, app):
        """Validate required configuration at startup."""
        if not cls.SECRET_KEY:
            raise RuntimeError(
                'SECRET_KEY environment variable is required in production. '
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        if not cls.DATABASE_URI.startswith('sqlite:///'):
            raise RuntimeError(f'Unsupported DATABASE_URI scheme: {cls.DATABASE_URI!r}')


class DevelopmentConfig(BaseConfig):
    """Development environment, cookies over plain HTTP."""

    DEBUG = True
    SESSION_COOKIE_SECURE = False


class TestConfig(BaseConfig):
    """Test environment with fast bcrypt and CSRF, rate limiting and mail off."""

    TESTING = True
    SESSION_COOKIE_SECURE = False
    BCRYPT_LOG_ROUNDS = 4
    RATELIMIT_ENABLED = False
    WTF_CSRF_ENABLED = False
    MAIL_ENABLED = False
    DATABASE_URI = 'sqlite:///test.db'


class RateLimitTestConfig(TestConfig):
    """Test config with rate limiting enabled."""

    RATELIMIT_ENABLED = True
    LOGIN_RATE_LIMIT_IP = '3/minute'
    SIGNUP_RATE_LIMIT_IP = '3/minute'


class CSRFTestConfig(TestConfig):
    """Test config with CSRF protection enabled."""

    WTF_CSRF_ENABLED = True
