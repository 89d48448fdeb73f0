"""
Tests for account creation.

Covers: successful signup, required fields, password policy, password
never echoed, uniqueness (pre-check and insert race), welcome mail, and
store failures.
"""

import pytest
from flask import session

from conftest import count_users, signup_form


class TestSignupSuccess:

    def test_redirects_home(self, client):
        response = client.post('/auth/signup', data=signup_form())
        assert response.status_code == 302
        assert response.headers['Location'] == '/'

    def test_binds_public_user_to_session(self, client):
        with client:
            client.post('/auth/signup', data=signup_form())
            assert session['user']['username'] == 'bob'
            assert session['user']['email'] == 'bob@example.com'
            assert 'password_hash' not in session['user']

    def test_stores_hashed_password_and_location(self, app, client):
        client.post('/auth/signup', data=signup_form())

        from houseofplants.auth.models import find_user_by_username
        with app.app_context():
            user = find_user_by_username('bob')

        assert user.password_hash != 'ficus-elastica'
        assert user.password_hash.startswith('$2')
        assert user.borough == 'Pankow'
        assert user.location == {'type': 'Point', 'coordinates': [13.402, 52.569]}
        assert user.profile_picture == '/images/default-profile-picture.png'

    def test_email_is_normalized(self, app, client):
        client.post('/auth/signup', data=signup_form(email='  Bob@Example.COM '))

        from houseofplants.auth.models import find_user_by_username
        with app.app_context():
            assert find_user_by_username('bob').email == 'bob@example.com'

    def test_location_and_borough_are_optional(self, app, client):
        response = client.post('/auth/signup', data=signup_form(
            borough='', latitude='', longitude='',
        ))
        assert response.status_code == 302

        from houseofplants.auth.models import find_user_by_username
        with app.app_context():
            user = find_user_by_username('bob')
        assert user.borough is None
        assert user.location is None

    def test_home_page_greets_new_user(self, client):
        response = client.post('/auth/signup', data=signup_form(), follow_redirects=True)
        assert b'Welcome back, Bob Blatt!' in response.data

    def test_welcome_mail_started(self, client, monkeypatch):
        from houseofplants.extensions import mailer
        sent = []
        monkeypatch.setattr(mailer, 'send_welcome', lambda *args: sent.append(args))

        client.post('/auth/signup', data=signup_form())

        assert sent == [('bob@example.com', 'Bob Blatt', 'bob')]


class TestLongPasswords:

    @pytest.mark.parametrize('password', ['p' * 100, '\u00fc' * 60])
    def test_signup_then_login(self, app, client, password):
        response = client.post('/auth/signup', data=signup_form(password=password))
        assert response.status_code == 302
        assert count_users(app) == 1

        client.get('/auth/logout')

        wrong = client.post('/auth/login', data={
            'username': 'bob',
            'password': password[:-1] + 'x',
        })
        assert wrong.status_code == 400
        assert b'Wrong credentials.' in wrong.data

        right = client.post('/auth/login', data={
            'username': 'bob',
            'password': password,
        })
        assert right.status_code == 302
        assert right.headers['Location'] == '/'


class TestSignupValidation:

    @pytest.mark.parametrize('missing', ['username', 'name', 'email'])
    def test_missing_required_field(self, app, client, missing):
        response = client.post('/auth/signup', data=signup_form(**{missing: ''}))
        assert response.status_code == 400
        assert b'Please fill in all required fields.' in response.data
        assert count_users(app) == 0

    def test_whitespace_only_counts_as_missing(self, client):
        response = client.post('/auth/signup', data=signup_form(username='   '))
        assert response.status_code == 400
        assert b'Please fill in all required fields.' in response.data

    def test_short_password_rejected(self, app, client):
        with client:
            response = client.post('/auth/signup', data=signup_form(password='short'))
            assert response.status_code == 400
            assert b'at least 8 characters long' in response.data
            assert 'user' not in session
        assert count_users(app) == 0

    def test_missing_password_rejected(self, client):
        data = signup_form()
        del data['password']
        response = client.post('/auth/signup', data=data)
        assert response.status_code == 400
        assert b'at least 8 characters long' in response.data

    def test_required_fields_checked_before_password(self, client):
        response = client.post('/auth/signup', data=signup_form(name='', password='short'))
        assert b'Please fill in all required fields.' in response.data
        assert b'at least 8 characters' not in response.data

    def test_overlong_password_rejected(self, client):
        response = client.post('/auth/signup', data=signup_form(password='p' * 129))
        assert response.status_code == 400
        assert b'Password is too long.' in response.data

    def test_invalid_email_rejected(self, client):
        response = client.post('/auth/signup', data=signup_form(email='not-an-email'))
        assert response.status_code == 400
        assert b'Please enter a valid email address.' in response.data

    def test_unknown_borough_rejected(self, app, client):
        response = client.post('/auth/signup', data=signup_form(borough='Hogwarts'))
        assert response.status_code == 400
        assert count_users(app) == 0

    def test_half_a_location_rejected(self, client):
        response = client.post('/auth/signup', data=signup_form(longitude=''))
        assert response.status_code == 400
        assert b'both latitude and longitude' in response.data

    def test_latitude_out_of_range(self, client):
        response = client.post('/auth/signup', data=signup_form(latitude='123'))
        assert response.status_code == 400
        assert b'Latitude must be between -90 and 90.' in response.data

    def test_entered_values_are_echoed(self, client):
        response = client.post('/auth/signup', data=signup_form(password='short'))
        assert b'value="bob"' in response.data
        assert b'value="bob@example.com"' in response.data
        assert b'value="Bob Blatt"' in response.data

    def test_password_is_never_echoed(self, client):
        response = client.post('/auth/signup', data=signup_form(
            name='', password='sup3r-secret-passw0rd',
        ))
        assert response.status_code == 400
        assert b'sup3r-secret-passw0rd' not in response.data

    def test_chosen_borough_is_reselected(self, client):
        response = client.post('/auth/signup', data=signup_form(password='short'))
        assert b'selected value="Pankow"' in response.data


class TestSignupUniqueness:

    def test_duplicate_username_rejected(self, app, client, alice):
        response = client.post('/auth/signup', data=signup_form(username='alice'))
        assert response.status_code == 400
        assert b'Username or email already taken' in response.data
        assert count_users(app) == 1

    def test_duplicate_email_rejected_case_insensitively(self, app, client, alice):
        response = client.post('/auth/signup', data=signup_form(email='ALICE@example.com'))
        assert response.status_code == 400
        assert b'Username or email already taken' in response.data
        assert count_users(app) == 1

    def test_lost_insert_race_reported_as_taken(self, app, client, alice, monkeypatch):
        """A concurrent signup that passed the pre-check hits the UNIQUE constraint."""
        from houseofplants.auth import flow
        monkeypatch.setattr(flow, 'find_user_by_username_or_email', lambda username, email: None)

        with client:
            response = client.post('/auth/signup', data=signup_form(username='alice'))
            assert response.status_code == 400
            assert b'Username or email already taken' in response.data
            assert 'user' not in session
        assert count_users(app) == 1

    def test_store_failure_renders_generic_error(self, client, monkeypatch):
        from houseofplants.auth import flow
        from houseofplants.auth.models import UserStoreError

        def broken_create_user(**kwargs):
            raise UserStoreError('disk I/O error at /var/lib/secret.db')

        monkeypatch.setattr(flow, 'create_user', broken_create_user)

        response = client.post('/auth/signup', data=signup_form())
        assert response.status_code == 500
        assert b'Something went wrong' in response.data
        assert b'/var/lib/secret.db' not in response.data


class TestSignupPage:

    def test_form_renders(self, client):
        response = client.get('/auth/signup')
        assert response.status_code == 200
        assert b'Sign up' in response.data
        assert 'Neukölln'.encode() in response.data
