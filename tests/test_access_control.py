"""
Test scenarios for admin audit views and the no-override rule.
Run with: pytest tests/test_access_control.py -v
"""

import pytest

from auth import admin_required
from conftest import basic_auth
from errors import AdminRequired


def test_admin_lists_users(client):
    response = client.get('/admin/users', headers=basic_auth('admin'))
    assert response.status_code == 200
    users = response.get_json()
    assert [u['username'] for u in users] == ['javajigi', 'sanjigi', 'admin']
    assert all('password_hash' not in u for u in users)


def test_regular_user_cannot_see_admin_views(client):
    response = client.get('/admin/users', headers=basic_auth('javajigi'))
    assert response.status_code == 403
    assert response.get_json()['error'] == 'ADMIN_REQUIRED'
    assert client.get('/admin/access-logs', headers=basic_auth('javajigi')).status_code == 403


def test_anonymous_cannot_see_admin_views(client):
    response = client.get('/admin/access-logs')
    assert response.status_code == 403
    assert response.get_json()['error'] == 'AUTH_REQUIRED'


def test_admin_cannot_delete_user_question(client):
    """
    Admin manages the audit trail only; ownership rules still apply.
    """
    response = client.delete('/api/questions/1', headers=basic_auth('admin'))
    assert response.status_code == 403
    assert client.get('/api/questions/1').status_code == 200


def test_admin_cannot_update_user_question(client):
    response = client.put('/api/questions/2', json={'title': 'x', 'contents': 'y'},
                          headers=basic_auth('admin'))
    assert response.status_code == 403


def test_access_logs_recorded(client):
    """Allowed and denied attempts both land in the access log, newest first."""
    client.put('/api/questions/1', json={'title': 't', 'contents': 'c'},
               headers=basic_auth('javajigi'))
    client.delete('/api/questions/1', headers=basic_auth('sanjigi'))

    response = client.get('/admin/access-logs', headers=basic_auth('admin'))
    assert response.status_code == 200
    logs = response.get_json()
    assert [(log['username'], log['action'], log['status']) for log in logs] == [
        ('sanjigi', 'DELETE', 'DENIED'),
        ('javajigi', 'UPDATE', 'ALLOWED'),
    ]
    assert logs[0]['reason'] == 'OWNERSHIP'
    assert logs[0]['resource_type'] == 'question'
    assert isinstance(logs[0]['timestamp'], str)


def test_access_logs_limit(client):
    for _ in range(3):
        client.delete('/api/questions/2', headers=basic_auth('javajigi'))

    response = client.get('/admin/access-logs?limit=2', headers=basic_auth('admin'))
    assert len(response.get_json()) == 2

    response = client.get('/admin/access-logs?limit=0', headers=basic_auth('admin'))
    assert len(response.get_json()) == 3


def test_admin_required_alone_rejects_anonymous(app):
    @admin_required
    def view():
        return 'ok'

    with app.test_request_context('/admin/users'):
        with pytest.raises(AdminRequired):
            view()
