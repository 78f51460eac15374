"""
Pytest fixtures for the rentdesk backend tests.

Each test gets its own app with a temporary SQLite file and upload folder.
bcrypt runs at its minimum cost so hashing stays fast.
"""

import pytest
from rentdesk import create_app
from rentdesk.config import get_settings
from rentdesk.extensions import db
from rentdesk.services import auth_service, token_service


TEST_PASSWORD = "secret1"


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.sqlite3'}",
        'JWT_SECRET': 'test-jwt-secret',
        'BCRYPT_ROUNDS': 4,
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'ALLOWED_DOCUMENT_EXTENSIONS': ['pdf', 'txt', 'png', 'jpg'],
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def settings(app):
    return get_settings()


@pytest.fixture(scope='function')
def alice(settings):
    """Regular user."""
    return auth_service.register_user("alice", "alice@example.com", TEST_PASSWORD, settings)


@pytest.fixture(scope='function')
def admin(settings):
    """Admin user."""
    return auth_service.register_user("boss", "boss@example.com", TEST_PASSWORD, settings, role="admin")


@pytest.fixture(scope='function')
def alice_headers(alice, settings):
    return auth_headers(token_service.issue_token(alice, settings))


@pytest.fixture(scope='function')
def admin_headers(admin, settings):
    return auth_headers(token_service.issue_token(admin, settings))


def get_auth_token(client, login: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'login': login,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
