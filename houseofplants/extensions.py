"""
Flask extension instances: created here, initialized in the app factory.

Kept apart from __init__.py so blueprints can import them without
circular imports.
"""

from flask_bcrypt import Bcrypt
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_session import Session
from flask_wtf.csrf import CSRFProtect

from houseofplants.mail import WelcomeMailer

# Password hashing: work factor from BCRYPT_LOG_ROUNDS.
bcrypt = Bcrypt()

# CSRF protection on every POST.
csrf = CSRFProtect()

# Server-side sessions.
sess = Session()

# Per-IP limits; storage, defaults and on/off come from RATELIMIT_* config.
limiter = Limiter(key_func=get_remote_address)

# Welcome mail on signup, sent off the request thread.
mailer = WelcomeMailer()
