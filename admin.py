"""
Admin module - read-only audit views.
Admins can inspect users and the access log; they get no bypass of the
question/answer ownership rules.
"""

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from auth import admin_required
from store import get_store

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


def _serialize(row):
    return {
        key: value.isoformat() if hasattr(value, 'isoformat') else value
        for key, value in row.items()
    }


@admin_bp.route('/users')
@login_required
@admin_required
def list_users():
    """All users, without password hashes."""
    users = get_store().get_all_users()
    return jsonify([_serialize(u) for u in users])


@admin_bp.route('/access-logs')
@login_required
@admin_required
def access_logs():
    """
    Recent mutation attempts, newest first.
    ?limit= caps the result at ACCESS_LOG_LIMIT.
    """
    max_limit = current_app.config['ACCESS_LOG_LIMIT']
    limit = request.args.get('limit', default=max_limit, type=int)
    if limit is None or limit < 1 or limit > max_limit:
        limit = max_limit
    logs = get_store().get_access_logs(limit=limit)
    return jsonify([_serialize(row) for row in logs])
