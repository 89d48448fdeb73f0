"""
Route guards based on session state.

A guard never raises: a request failing its precondition is answered
with a redirect before the view runs.
"""

from functools import wraps
from typing import Optional
from urllib.parse import urlsplit

from flask import flash, redirect, request, session, url_for


def current_session_user(sess=None) -> Optional[dict]:
    """The public user snapshot bound to the session, or None when anonymous."""
    if sess is None:
        sess = session
    return sess.get('user')


def is_safe_redirect(target: Optional[str]) -> bool:
    """Only local paths ('/profile', not '//evil.example' or 'https://...')."""
    if not target:
        return False
    parts = urlsplit(target)
    return (
        not parts.scheme
        and not parts.netloc
        and target.startswith('/')
        and not target.startswith('//')
        and '\\' not in target
    )


def anonymous_required(f):
    """Send already-authenticated users home instead of to signup/login."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_session_user() is not None:
            return redirect(url_for('main.index'))
        return f(*args, **kwargs)
    return decorated_function


def login_required(f):
    """
    Require a session user.

    Anonymous requests go to the login page with the requested path in
    ?next= so login can send them back.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_session_user() is None:
            flash('Please log in to access this page.', 'info')
            next_path = request.full_path if request.query_string else request.path
            return redirect(url_for('auth.login', next=next_path))
        return f(*args, **kwargs)
    return decorated_function
