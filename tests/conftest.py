"""
Pytest fixtures for the House of Plants test suite.

Every app gets its own temporary instance folder (database and session
files), so tests never share state:
- app/client: base test config (CSRF, rate limiting and mail off)
- csrf_app/csrf_client: CSRF enabled
- rate_limit_app/rate_limit_client: rate limiting enabled
"""

import pytest

from houseofplants import create_app
from houseofplants.config import CSRFTestConfig, RateLimitTestConfig, TestConfig

ALICE = {
    'username': 'alice',
    'name': 'Alice Gruen',
    'email': 'alice@example.com',
    'password': 'monstera-deliciosa',
    'borough': 'Neukölln',
    'latitude': '52.4811',
    'longitude': '13.4350',
}


def signup_form(**overrides):
    """Valid signup form data for a fresh account, with overrides."""
    data = {
        'username': 'bob',
        'name': 'Bob Blatt',
        'email': 'bob@example.com',
        'password': 'ficus-elastica',
        'borough': 'Pankow',
        'latitude': '52.5690',
        'longitude': '13.4020',
    }
    data.update(overrides)
    return data


def count_users(app) -> int:
    from houseofplants.auth.models import get_db
    with app.app_context():
        return get_db().execute('SELECT COUNT(*) FROM users').fetchone()[0]


def add_user(app, username='alice', email='alice@example.com', password='monstera-deliciosa',
             name='Alice Gruen', **fields):
    """Store a user directly, bypassing the signup route."""
    from houseofplants.auth.models import create_user
    from houseofplants.auth.passwords import hash_password
    with app.app_context():
        return create_user(
            username=username,
            email=email,
            password_hash=hash_password(password),
            name=name,
            **fields,
        )


@pytest.fixture
def app(tmp_path):
    """Flask app with the base test configuration."""
    yield create_app(TestConfig, instance_path=str(tmp_path))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def alice(app):
    """Alice, stored with borough and location."""
    from houseofplants.auth.models import make_location
    return add_user(
        app,
        borough=ALICE['borough'],
        location=make_location(52.4811, 13.4350),
    )


@pytest.fixture
def authenticated_client(client, alice):
    """Test client logged in as alice."""
    response = client.post('/auth/login', data={
        'username': ALICE['username'],
        'password': ALICE['password'],
    })
    assert response.status_code == 302
    return client


@pytest.fixture
def csrf_app(tmp_path):
    yield create_app(CSRFTestConfig, instance_path=str(tmp_path))


@pytest.fixture
def csrf_client(csrf_app):
    return csrf_app.test_client()


@pytest.fixture
def rate_limit_app(tmp_path):
    yield create_app(RateLimitTestConfig, instance_path=str(tmp_path))


@pytest.fixture
def rate_limit_client(rate_limit_app):
    return rate_limit_app.test_client()
