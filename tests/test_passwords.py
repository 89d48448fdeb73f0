"""
Tests for bcrypt password hashing and timing-safe verification.
"""

from houseofplants.auth import passwords

from conftest import add_user


def test_hash_is_salted(app):
    with app.app_context():
        first = passwords.hash_password('monstera-deliciosa')
        second = passwords.hash_password('monstera-deliciosa')
    assert first != second
    assert 'monstera-deliciosa' not in first


def test_work_factor_from_config(app):
    with app.app_context():
        hashed = passwords.hash_password('monstera-deliciosa')
    # TestConfig uses 4 rounds: $2b$04$...
    assert hashed.split('$')[2] == '04'


def test_check_password(app):
    with app.app_context():
        hashed = passwords.hash_password('monstera-deliciosa')
        assert passwords.check_password(hashed, 'monstera-deliciosa')
        assert not passwords.check_password(hashed, 'Monstera-deliciosa')


def test_verify_credentials(app):
    user = add_user(app, password='monstera-deliciosa')
    with app.app_context():
        assert passwords.verify_credentials(user, 'monstera-deliciosa')
        assert not passwords.verify_credentials(user, 'wrong-password')


def test_unknown_user_still_runs_bcrypt(app, monkeypatch):
    calls = []
    real_check = passwords.check_password

    def counting_check(password_hash, password):
        calls.append(password_hash)
        return real_check(password_hash, password)

    monkeypatch.setattr(passwords, 'check_password', counting_check)

    with app.app_context():
        assert passwords.verify_credentials(None, 'anything-at-all') is False
    assert calls == [passwords.DUMMY_HASH]


def test_passwords_past_72_bytes(app):
    long_password = 'p' * 100
    with app.app_context():
        hashed = passwords.hash_password(long_password)
        assert passwords.check_password(hashed, long_password)
        assert not passwords.check_password(hashed, 'p' * 99 + 'q')


def test_multibyte_password_past_72_bytes(app):
    # 40 characters, 80 bytes in UTF-8
    password = 'ü' * 40
    assert len(password.encode('utf-8')) > 72
    user = add_user(app, password=password)
    with app.app_context():
        assert passwords.verify_credentials(user, password)
        assert not passwords.verify_credentials(user, 'ü' * 39 + 'u')
        assert passwords.verify_credentials(None, password) is False
