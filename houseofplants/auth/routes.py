"""
Authentication routes.

Request flow (signup/login POST):
1. CSRF validation (flask-wtf before_request hook)
2. Guard (anonymous_required / login_required)
3. Rate limiter (POST only)
4. Auth flow operation with the session passed explicitly
5. Session ID rotated after a successful signup or login
6. Outcome turned into a rendered template or a redirect
"""

from flask import current_app, redirect, render_template, request, session

from houseofplants.auth import auth_bp, flow
from houseofplants.auth.audit import get_request_context
from houseofplants.auth.forms import LoginForm, SignupForm
from houseofplants.auth.guards import anonymous_required, login_required
from houseofplants.extensions import limiter, mailer


def respond(outcome: flow.AuthOutcome, **context):
    """Turn an auth flow outcome into a Flask response."""
    if isinstance(outcome, flow.Redirect):
        return redirect(outcome.location)
    context.update(outcome.context)
    return render_template(
        outcome.template,
        error_message=outcome.error_message,
        **context,
    ), outcome.status


def rotate_session_id(outcome: flow.AuthOutcome) -> None:
    """Give a freshly authenticated session a new ID, dropping the old record."""
    if isinstance(outcome, flow.Redirect):
        current_app.session_interface.regenerate(session)


@auth_bp.route('/signup', methods=['GET', 'POST'])
@anonymous_required
@limiter.limit(
    lambda: current_app.config.get('SIGNUP_RATE_LIMIT_IP', '20/hour'),
    methods=['POST'],
    error_message='Too many signups from your network. Please try again later.',
)
def signup():
    """Signup form (GET) and account creation (POST)."""
    form = SignupForm()
    if request.method == 'GET':
        return respond(flow.Render('auth/signup.html'), form=form)

    outcome = flow.signup(form, session, mailer, request_context=get_request_context())
    rotate_session_id(outcome)
    return respond(outcome)


@auth_bp.route('/login', methods=['GET', 'POST'])
@anonymous_required
@limiter.limit(
    lambda: current_app.config.get('LOGIN_RATE_LIMIT_IP', '10/minute'),
    methods=['POST'],
    error_message='Too many login attempts. Please wait a moment and try again.',
)
def login():
    """Login form (GET) and authentication (POST)."""
    next_url = request.args.get('next')
    form = LoginForm()

    if request.method == 'GET':
        return respond(flow.Render('auth/login.html'), form=form, next_url=next_url)

    outcome = flow.login(
        form,
        session,
        next_url=next_url,
        request_context=get_request_context(),
    )
    rotate_session_id(outcome)
    return respond(outcome, form=form, next_url=next_url)


@auth_bp.route('/logout', methods=['GET', 'POST'])
@login_required
def logout():
    """Destroy the session and go home."""
    return respond(flow.logout(session, request_context=get_request_context()))
