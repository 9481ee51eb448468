"""
Pytest configuration and fixtures for testing the chat translation API.
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
from app.models import Message, Translation

fake = Faker()

TEST_SECRET = 'test-secret-key-for-testing'


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['FLASK_ENV'] = 'testing'
    os.environ['JWT_SECRET_KEY'] = TEST_SECRET

    app = create_app('testing')

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


def _create_message(text=None, sender='A', **overrides):
    """Helper to create a text message with sensible defaults."""
    message = Message(
        sender=sender,
        type='text',
        text=fake.sentence(nb_words=6) if text is None else text,
        **overrides
    )
    db.session.add(message)
    db.session.commit()
    return message.id


@pytest.fixture
def make_message(db_session):
    """Factory creating messages; returns the new message ID."""
    return _create_message


@pytest.fixture
def english_message(db_session):
    return _create_message(text='Hello world')


@pytest.fixture
def chinese_message(db_session):
    return _create_message(text='你好世界', sender='B')


@pytest.fixture
def make_translation(db_session):
    """Factory inserting a cached translation directly."""
    def _make(message_id, source='en', target='zh-CN', text='你好世界', created_at=None):
        record = Translation(
            message_id=message_id,
            source_language=source,
            target_language=target,
            translated_text=text,
            created_at=created_at or datetime.utcnow()
        )
        db.session.add(record)
        db.session.commit()
        return record.id
    return _make


def make_token(role='A', expires_in=timedelta(hours=1), secret=TEST_SECRET):
    """Issue a token the way the auth service does."""
    payload = {
        'role': role,
        'exp': datetime.utcnow() + expires_in
    }
    return jwt.encode(payload, secret, algorithm='HS256')


@pytest.fixture
def auth_headers():
    """Authorization headers for user A."""
    return {'Authorization': f'Bearer {make_token("A")}'}


@pytest.fixture
def second_auth_headers():
    """Authorization headers for user B."""
    return {'Authorization': f'Bearer {make_token("B")}'}


class FakeMyMemoryResponse:
    """Stand-in for a requests.Response from the MyMemory API."""

    def __init__(self, status_code=200, body=None, invalid_json=False):
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError('Expecting value: line 1 column 1 (char 0)')
        return self._body


def mymemory_ok(text, quota_finished=False):
    """A successful MyMemory body translating to text."""
    return FakeMyMemoryResponse(200, {
        'responseData': {'translatedText': text, 'match': 1},
        'quotaFinished': quota_finished,
        'responseStatus': 200
    })


@pytest.fixture
def mymemory_response():
    """Factory for fake MyMemory HTTP responses."""
    def _make(status_code=200, body=None, invalid_json=False, translated=None, quota_finished=False):
        if translated is not None:
            return mymemory_ok(translated, quota_finished=quota_finished)
        return FakeMyMemoryResponse(status_code, body, invalid_json)
    return _make


@pytest.fixture
def token_factory():
    return make_token
