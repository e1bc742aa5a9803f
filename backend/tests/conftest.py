"""
Pytest fixtures for cashdesk backend tests.

Provides an in-memory database, a per-test table wipe, the Flask test
client and the CLI runner.
"""

import pytest

from cashdesk import create_app
from cashdesk.extensions import db


# Opening count used across the suite: 2x500 + 3x100 + 1x20 = 1320
OPENING_COUNT = {"500": 2, "100": 3, "20": 1}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh tables for each test."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app, db_session):
    """CLI runner bound to the test app."""
    return app.test_cli_runner()


@pytest.fixture
def opening_count():
    return dict(OPENING_COUNT)
