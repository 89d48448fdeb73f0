"""
Centralized error handling.

Every failure that the auth flow does not recover from itself ends here:
user store failures and any other unhandled exception are audit-logged
and rendered as the generic 500 page, without internal details.
"""

import logging

from flask import flash, redirect, render_template, request, url_for
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException, InternalServerError

from houseofplants.auth.audit import get_request_context, log_csrf_failure
from houseofplants.auth.models import UserStoreError
from houseofplants.logging_config import audit_log

logger = logging.getLogger(__name__)


def log_server_error(error: BaseException) -> None:
    audit_log(
        event='server_error',
        message=f'Unhandled {type(error).__name__} on {request.method} {request.path}',
        level=logging.ERROR,
        reason=type(error).__name__,
        path=request.path,
        **get_request_context(),
    )
    logger.error('Unhandled error', exc_info=error)


def render_server_error():
    return render_template('errors/500.html'), 500


def register_error_handlers(app) -> None:
    """Install the application-wide error handlers."""

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        # The user only needs a fresh form.
        log_csrf_failure()
        flash('Your form session has expired. Please try again.', 'warning')
        if request.endpoint in ('auth.signup', 'auth.login'):
            return redirect(request.full_path if request.query_string else request.path)
        return redirect(url_for('main.index'))

    @app.errorhandler(UserStoreError)
    def handle_store_error(e):
        log_server_error(e)
        return render_server_error()

    @app.errorhandler(404)
    def handle_not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(413)
    def handle_request_too_large(e):
        return render_template('errors/413.html'), 413

    @app.errorhandler(429)
    def handle_rate_limit(e):
        return render_template('errors/429.html', description=e.description), 429

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException) and not isinstance(e, InternalServerError):
            return e
        log_server_error(getattr(e, 'original_exception', None) or e)
        return render_server_error()
