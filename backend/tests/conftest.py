import os
import sys
import pytest

# Ensure the backend root (containing the `app` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from app import create_app, db


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    GAME_STARTING_PRIZE = '50.00'
    PINT_GOAL = '7.50'
    AUTH_TOKEN_MAX_AGE_SEC = 3600
    CORS_ORIGINS = ['http://localhost:5173']


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import app.models  # noqa: F401
        db.create_all()
    # Requests push their own app context, so the login user never leaks between them
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def app_ctx(flask_app):
    """App context for calling the services directly."""
    with flask_app.app_context():
        yield flask_app
        db.session.remove()


def register_user(client, email, display_name, password='password'):
    res = client.post('/api/auth/register', json={
        'email': email,
        'password': password,
        'display_name': display_name,
    })
    assert res.status_code == 201, res.get_json()
    body = res.get_json()
    return {
        'id': body['user']['id'],
        'email': email,
        'headers': {'Authorization': f"Bearer {body['token']}"},
    }


@pytest.fixture()
def players(client):
    """Three registered users keyed by first name, each with bearer headers."""
    return {
        name: register_user(client, f'{name}@example.com', name.title())
        for name in ('alice', 'bob', 'cara')
    }


@pytest.fixture()
def accounts(app_ctx):
    """Three users created straight in the database; returns their ids."""
    from app.models import User
    ids = {}
    for name in ('alice', 'bob', 'cara'):
        user = User(email=f'{name}@example.com', display_name=name.title())
        user.set_password('password')
        db.session.add(user)
        db.session.flush()
        ids[name] = user.id
    db.session.commit()
    return ids
