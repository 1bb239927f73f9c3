"""
Pytest fixtures for quotedesk backend tests.

Provides test database setup, two independent users, and a test client.
"""

import pytest
from quotedesk import create_app
from quotedesk.extensions import db
from quotedesk.services.auth_service import register_user
from quotedesk.services.session_service import create_session


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'RESEND_API_KEY': None,
        'CODE_RETRY_BACKOFF': 0,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def user_a(db_session):
    """First account; owns the documents under test."""
    return register_user("User A", "user_a@acme.com", "Password123")


@pytest.fixture(scope='function')
def user_b(db_session):
    """Second, unrelated account."""
    return register_user("User B", "user_b@beta.com", "Password456")


@pytest.fixture(scope='function')
def token_a(db_session, user_a):
    _, token = create_session(user_a.id)
    return token


@pytest.fixture(scope='function')
def token_b(db_session, user_b):
    _, token = create_session(user_b.id)
    return token

