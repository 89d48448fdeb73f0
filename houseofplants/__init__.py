"""
Flask application factory for House of Plants.

Extension initialization order:
1. bcrypt: the dummy hash below needs the configured work factor
2. csrf: before_request hook validating every POST
3. session: server-side session store
4. limiter: reads RATELIMIT_* from config, including RATELIMIT_ENABLED
5. mailer: copies MAIL_* settings for the background sender
"""

import os

from cachelib import FileSystemCache
from flask import Flask, session

from houseofplants.config import DevelopmentConfig


def create_app(config_class=None, instance_path=None):
    """
    Create and configure the application.

    Args:
        config_class: Configuration class. Defaults to DevelopmentConfig.
        instance_path: Absolute path of the instance folder holding the
            database and session files. Tests pass a temporary directory.

    Returns:
        Configured Flask application instance.
    """
    if config_class is None:
        config_class = DevelopmentConfig

    app = Flask(
        __name__,
        instance_path=instance_path,
        static_folder='static',
        static_url_path='/static',
    )
    app.config.from_object(config_class)
    if hasattr(config_class, 'init_app'):
        config_class.init_app(app)

    os.makedirs(app.instance_path, exist_ok=True)

    session_dir = os.path.join(app.instance_path, 'flask_sessions')
    os.makedirs(session_dir, exist_ok=True)
    app.config.setdefault('SESSION_CACHELIB', FileSystemCache(session_dir, threshold=500))

    # --- Extensions ---
    from houseofplants.extensions import bcrypt, csrf, limiter, mailer, sess

    bcrypt.init_app(app)
    csrf.init_app(app)
    sess.init_app(app)
    limiter.init_app(app)
    mailer.init_app(app)

    # --- Request hooks ---
    from houseofplants.auth.audit import assign_request_id
    app.before_request(assign_request_id)

    from houseofplants.headers import init_security_headers
    init_security_headers(app)

    @app.context_processor
    def inject_session_user() -> dict:
        """The logged-in user's public snapshot, as `user`, in every template."""
        return {'user': session.get('user')}

    # --- Logging ---
    from houseofplants.logging_config import setup_security_logging
    setup_security_logging(app)

    from houseofplants.auth.passwords import init_dummy_hash
    init_dummy_hash(app)

    # --- Blueprints ---
    from houseofplants.auth import auth_bp
    from houseofplants.main import main_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)

    from houseofplants.errors import register_error_handlers
    register_error_handlers(app)

    # --- Database ---
    from houseofplants.auth.models import close_db, init_db

    app.teardown_appcontext(close_db)
    init_db(app)

    return app
