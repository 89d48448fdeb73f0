"""
Home page and the signed-in user's profile.
"""

from flask import Blueprint, flash, redirect, render_template, request, session, url_for

from houseofplants.auth.forms import ProfileForm
from houseofplants.auth.guards import current_session_user, login_required
from houseofplants.auth.models import find_user_by_id, make_location, update_user

main_bp = Blueprint('main', __name__)


def _load_session_user():
    """The stored user behind the session snapshot, or None if it is gone."""
    snapshot = current_session_user()
    return find_user_by_id(snapshot['id']) if snapshot else None


@main_bp.route('/')
def index():
    return render_template('index.html')


@main_bp.route('/profile')
@login_required
def profile():
    user = _load_session_user()
    if user is None:
        session.clear()
        return redirect(url_for('auth.login'))
    return render_template('profile/show.html', profile=user.public_view())


@main_bp.route('/profile/edit', methods=['GET', 'POST'])
@login_required
def edit_profile():
    """Edit name, borough and location; the session snapshot follows."""
    user = _load_session_user()
    if user is None:
        session.clear()
        return redirect(url_for('auth.login'))

    if request.method == 'GET':
        coordinates = (user.location or {}).get('coordinates') or [None, None]
        form = ProfileForm(
            name=user.name,
            borough=user.borough or '',
            longitude=coordinates[0],
            latitude=coordinates[1],
        )
        return render_template('profile/edit.html', form=form)

    form = ProfileForm()
    if not form.validate():
        return render_template(
            'profile/edit.html',
            form=form,
            error_message=form.error_message,
        ), 400

    updated = update_user(
        user.id,
        name=form.name.data,
        borough=form.borough.data or None,
        location=make_location(form.latitude.data, form.longitude.data),
    )
    session['user'] = updated.public_view()

    flash('Your profile has been updated.', 'info')
    return redirect(url_for('main.profile'))
