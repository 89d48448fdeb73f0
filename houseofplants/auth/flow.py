"""
Signup, login and logout.

Each operation takes the already-bound form and the session mapping as
explicit arguments and returns an outcome for the route layer to turn
into a response:

    Render    re-render a form (status 400 on failure) with one message
    Redirect  go elsewhere

Validation, conflict and authentication failures are handled here.
UserStoreError from anything other than a uniqueness conflict is left
to propagate to the application's error handlers.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Union

from houseofplants.auth.guards import is_safe_redirect
from houseofplants.auth.models import (
    DuplicateUserError,
    User,
    create_user,
    find_user_by_username,
    find_user_by_username_or_email,
    make_location,
)
from houseofplants.auth.passwords import hash_password, verify_credentials
from houseofplants.logging_config import audit_log

ALREADY_TAKEN_MESSAGE = 'Username or email already taken'
WRONG_CREDENTIALS_MESSAGE = 'Wrong credentials.'

HOME = '/'


@dataclass(frozen=True)
class Render:
    template: str
    status: int = 200
    error_message: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Redirect:
    location: str


AuthOutcome = Union[Render, Redirect]


def establish_session(session: MutableMapping, user: User) -> None:
    """Replace whatever the session held with the user's public snapshot."""
    session.clear()
    session['user'] = user.public_view()
    session['login_time'] = datetime.now(timezone.utc).isoformat()


def signup(form, session: MutableMapping, mailer, request_context: Optional[dict] = None) -> AuthOutcome:
    """
    Create an account from a submitted SignupForm.

    On success the new user is logged in, the welcome mail is started in
    the background and the user is sent home.
    """
    ctx = request_context or {}

    def reject(message: str, reason: str) -> Render:
        audit_log(
            event='signup_rejected',
            message=f'Signup rejected: {reason}',
            username=form.username.data,
            reason=reason,
            **ctx,
        )
        return Render(
            'auth/signup.html',
            status=400,
            error_message=message,
            context={'form': form},
        )

    if not form.validate():
        return reject(form.error_message, 'invalid_form')

    username = form.username.data
    email = form.email.data

    if find_user_by_username_or_email(username, email) is not None:
        return reject(ALREADY_TAKEN_MESSAGE, 'already_taken')

    try:
        user = create_user(
            username=username,
            email=email,
            password_hash=hash_password(form.password.data),
            name=form.name.data,
            borough=form.borough.data or None,
            location=make_location(form.latitude.data, form.longitude.data),
        )
    except DuplicateUserError:
        # Lost a race with a concurrent signup for the same username/email.
        return reject(ALREADY_TAKEN_MESSAGE, 'already_taken_on_insert')

    establish_session(session, user)
    audit_log(
        event='signup_success',
        message=f'Account created for {user.username}',
        username=user.username,
        **ctx,
    )

    mailer.send_welcome(user.email, user.name, user.username)

    return Redirect(HOME)


def login(form, session: MutableMapping, next_url: Optional[str] = None,
          request_context: Optional[dict] = None) -> AuthOutcome:
    """
    Authenticate a submitted LoginForm.

    Unknown usernames and wrong passwords produce the same response.
    """
    ctx = request_context or {}

    if not form.validate():
        audit_log(
            event='login_failed',
            message='Login form rejected',
            username=form.username.data,
            reason='invalid_form',
            **ctx,
        )
        return Render('auth/login.html', status=400, error_message=form.error_message)

    username = form.username.data
    user = find_user_by_username(username)

    if not verify_credentials(user, form.password.data):
        audit_log(
            event='login_failed',
            message=f'Failed login for {username}',
            level=logging.WARNING,
            username=username,
            reason='invalid_credentials',
            **ctx,
        )
        return Render('auth/login.html', status=400, error_message=WRONG_CREDENTIALS_MESSAGE)

    establish_session(session, user)
    audit_log(
        event='login_success',
        message=f'Successful login for {username}',
        username=username,
        **ctx,
    )

    return Redirect(next_url if is_safe_redirect(next_url) else HOME)


def logout(session: MutableMapping, request_context: Optional[dict] = None) -> AuthOutcome:
    """
    End the session.

    Clearing every key makes flask-session delete the stored record and
    the cookie, so the old session ID resolves to nothing afterwards.
    """
    ctx = request_context or {}
    user = session.get('user') or {}

    session.clear()

    audit_log(
        event='logout',
        message=f"Logout for {user.get('username', 'unknown')}",
        username=user.get('username'),
        **ctx,
    )
    return Redirect(HOME)
