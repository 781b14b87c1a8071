"""
Pytest configuration and fixtures for testing the Marketplace API.
"""

import os
import sys
from datetime import datetime, timedelta

import jwt
import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app, db
from app.models.user import User
from app.models.listing import Listing

fake = Faker()

# Fixed reference time for manager tests
NOW = datetime(2024, 6, 1, 0, 0, 0)


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing.

    Uses a SQLite file rather than :memory: because cleanup passes run on
    their own connections from worker threads.
    """
    db_path = tmp_path_factory.mktemp('db') / 'marketplace_test.db'
    os.environ['JWT_SECRET_KEY'] = 'test-secret-key-for-testing'

    app = create_app('testing', overrides={
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'BOOST_CLEANUP_WORKERS': 1,
    })

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


def _create_user(**overrides):
    """Helper to create a user with sensible defaults."""
    data = {
        'username': fake.user_name() + fake.pystr(min_chars=4, max_chars=6),
        'email': fake.unique.email(),
        'full_name': fake.name(),
    }
    data.update(overrides)
    user = User(**data)
    db.session.add(user)
    db.session.commit()
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
    }


def _get_token(app, user_id):
    """Sign a JWT the way the auth service does."""
    return jwt.encode({'user_id': user_id}, app.config['JWT_SECRET_KEY'], algorithm='HS256')


def reload_listing(listing_id):
    """Fetch a listing bypassing the session's identity map."""
    db.session.expire_all()
    return db.session.get(Listing, listing_id)


@pytest.fixture
def test_user(app, db_session):
    """Create a test user."""
    return _create_user()


@pytest.fixture
def second_user(app, db_session):
    """Create a second test user for ownership tests."""
    return _create_user()


@pytest.fixture
def auth_headers(app, test_user):
    """Get authentication headers for test user."""
    return {'Authorization': f'Bearer {_get_token(app, test_user["id"])}'}


@pytest.fixture
def second_auth_headers(app, second_user):
    """Get authentication headers for second user."""
    return {'Authorization': f'Bearer {_get_token(app, second_user["id"])}'}


@pytest.fixture
def make_listing(db_session, test_user):
    """Factory creating a committed listing; returns its id."""
    def _make(**overrides):
        data = {
            'title': fake.sentence(nb_words=4),
            'description': fake.paragraph(),
            'price': round(fake.pyfloat(min_value=10, max_value=500, right_digits=2), 2),
            'category': 'electronics',
            'status': 'active',
            'seller_id': test_user['id'],
            'created_at': NOW - timedelta(days=30),
        }
        data.update(overrides)
        listing = Listing(**data)
        db.session.add(listing)
        db.session.commit()
        return listing.id
    return _make


@pytest.fixture
def test_listing(make_listing):
    """Create a plain, unboosted test listing."""
    return {'id': make_listing()}
