"""
Signup, session login/logout and HTTP Basic credentials.
"""

import pytest

from conftest import basic_auth

QUESTION = {'title': 'title', 'contents': 'contents'}


def test_signup_creates_user(client, store):
    response = client.post('/api/users', json={
        'username': 'newbie',
        'name': 'New Bie',
        'email': 'newbie@example.com',
        'password': 'secret1',
    })
    assert response.status_code == 201
    assert response.get_json()['username'] == 'newbie'
    row = store.get_user_by_username('newbie')
    assert row['password_hash'] != 'secret1'
    assert row['role'] == 'user'


@pytest.mark.parametrize('payload', [
    {'username': 'javajigi', 'email': 'other@example.com', 'password': 'secret1'},
    {'username': 'someone', 'email': 'javajigi@slipp.net', 'password': 'secret1'},
    {'username': 'ab', 'email': 'ab@example.com', 'password': 'secret1'},
    {'username': 'shortpw', 'email': 'shortpw@example.com', 'password': '123'},
    {'username': 'noemail', 'password': 'secret1'},
    {'username': None, 'email': 'none@example.com', 'password': 'secret1'},
    {'username': 'numbername', 'name': 42, 'email': 'n@example.com', 'password': 'secret1'},
    {'username': 'nullpass', 'email': 'nullpass@example.com', 'password': None},
    {'username': 'listmail', 'email': ['a@example.com'], 'password': 'secret1'},
])
def test_signup_rejects_invalid(client, payload):
    response = client.post('/api/users', json=payload)
    assert response.status_code == 400


def test_signup_requires_json_object(client):
    assert client.post('/api/users', json=['javajigi']).status_code == 400


def test_new_user_can_post_with_basic_auth(client):
    client.post('/api/users', json={
        'username': 'newbie', 'email': 'newbie@example.com', 'password': 'secret1',
    })
    response = client.post('/api/questions', json=QUESTION,
                           headers=basic_auth('newbie', 'secret1'))
    assert response.status_code == 201
    assert response.get_json()['writer']['username'] == 'newbie'


def test_session_login_then_create(client):
    response = client.post('/api/login', json={'username': 'javajigi', 'password': 'password'})
    assert response.status_code == 200
    assert response.get_json()['username'] == 'javajigi'

    response = client.post('/api/questions', json=QUESTION)
    assert response.status_code == 201
    assert response.get_json()['writer']['username'] == 'javajigi'


def test_login_with_bad_password(client):
    response = client.post('/api/login', json={'username': 'javajigi', 'password': 'nope'})
    assert response.status_code == 401
    assert client.post('/api/questions', json=QUESTION).status_code == 403


def test_login_unknown_user(client):
    response = client.post('/api/login', json={'username': 'ghost', 'password': 'password'})
    assert response.status_code == 401


def test_logout_ends_session(client):
    client.post('/api/login', json={'username': 'javajigi', 'password': 'password'})
    assert client.post('/api/logout').status_code == 204
    assert client.post('/api/questions', json=QUESTION).status_code == 403


def test_logout_anonymous_forbidden(client):
    response = client.post('/api/logout')
    assert response.status_code == 403
    assert response.get_json()['error'] == 'AUTH_REQUIRED'


def test_basic_auth_does_not_leak_into_session(client):
    client.post('/api/questions', json=QUESTION, headers=basic_auth('javajigi'))
    assert client.post('/api/questions', json=QUESTION).status_code == 403


def test_signup_null_username_creates_nobody(client, store):
    response = client.post('/api/users', json={
        'username': None, 'email': 'a@b.c', 'password': 'secret1',
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == 'INVALID_PAYLOAD'
    assert store.get_user_by_username('None') is None
    assert len(store.get_all_users()) == 3


def test_login_non_string_credentials(client):
    response = client.post('/api/login', json={'username': None, 'password': 'password'})
    assert response.status_code == 400
