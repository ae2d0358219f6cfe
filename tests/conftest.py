"""
Shared fixtures: an app on a fresh MemoryStore per test, seeded with
javajigi (question 1), sanjigi (question 2) and an admin.
"""

from base64 import b64encode

import pytest

from app import create_app
from models import User
from seed_data import seed
from store import MemoryStore

PASSWORD = 'password'
# fast hashing keeps per-request basic auth cheap in tests
HASH_METHOD = 'pbkdf2:sha256:1000'


@pytest.fixture
def store():
    store = MemoryStore()
    seed(store, password=PASSWORD, hash_method=HASH_METHOD)
    return store


@pytest.fixture
def app(store):
    app = create_app(
        {
            'TESTING': True,
            'SECRET_KEY': 'test-secret',
            'PASSWORD_HASH_METHOD': HASH_METHOD,
            'ACCESS_LOG_LIMIT': 50,
        },
        store=store,
    )
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def service(app):
    return app.extensions['qna_service']


def basic_auth(username, password=PASSWORD):
    token = b64encode(f'{username}:{password}'.encode('utf-8')).decode('ascii')
    return {'Authorization': f'Basic {token}'}


@pytest.fixture
def javajigi(store):
    return User.from_row(store.get_user_by_username('javajigi'))


@pytest.fixture
def sanjigi(store):
    return User.from_row(store.get_user_by_username('sanjigi'))


@pytest.fixture
def admin(store):
    return User.from_row(store.get_user_by_username('admin'))


def snapshot(store):
    """Full question/answer state, for before/after comparisons."""
    questions = store.get_questions(include_deleted=True)
    answers = [
        answer
        for question in questions
        for answer in store.get_answers_by_question(question['id'], include_deleted=True)
    ]
    return questions, answers
