"""
Store selection and the in-process store.

MemoryStore mirrors the MySQLStore interface in db.py and returns the same
dict rows, so the service layer cannot tell them apart. It backs the test
suite and STORE_BACKEND=memory development runs.
"""

import itertools
import threading
from contextlib import contextmanager
from datetime import datetime, timezone

from flask import current_app

EXTENSION_KEY = 'qna_store'


def get_store():
    """Store bound to the running Flask app."""
    return current_app.extensions[EXTENSION_KEY]


def create_store(backend, db_config=None):
    if backend == 'memory':
        return MemoryStore()
    if backend == 'mysql':
        from db import MySQLStore
        return MySQLStore(db_config)
    raise ValueError(f"Unknown store backend: {backend!r}")


def _now():
    return datetime.now(timezone.utc)


class MemoryStore:
    """Dict-backed store. One re-entrant lock makes every call atomic."""

    def __init__(self):
        self._lock = threading.RLock()
        self._users = {}
        self._questions = {}
        self._answers = {}
        self._access_logs = []
        self._user_ids = itertools.count(1)
        self._question_ids = itertools.count(1)
        self._answer_ids = itertools.count(1)
        self._log_ids = itertools.count(1)

    @contextmanager
    def transaction(self):
        """
        Hold the store lock for the enclosed calls. Writes are applied
        directly, so a block that fails midway is not rolled back; the
        service only writes after every check has passed.
        """
        with self._lock:
            yield

    def init_schema(self):
        pass

    # --- User operations ---

    def _public_user(self, row):
        return dict(row) if row else None

    def get_user_by_id(self, user_id):
        with self._lock:
            return self._public_user(self._users.get(user_id))

    def get_user_by_username(self, username):
        with self._lock:
            for row in self._users.values():
                if row['username'] == username:
                    return dict(row)
            return None

    def get_user_by_email(self, email):
        with self._lock:
            for row in self._users.values():
                if row['email'] == email:
                    return dict(row)
            return None

    def create_user(self, username, name, email, password_hash, role='user'):
        with self._lock:
            if self.get_user_by_username(username) or self.get_user_by_email(email):
                raise ValueError(f"Duplicate user: {username}")
            user_id = next(self._user_ids)
            self._users[user_id] = {
                'id': user_id,
                'username': username,
                'name': name,
                'email': email,
                'password_hash': password_hash,
                'role': role,
            }
            return user_id

    def get_all_users(self):
        with self._lock:
            return [
                {k: v for k, v in row.items() if k != 'password_hash'}
                for _, row in sorted(self._users.items())
            ]

    def _with_author(self, row):
        author = self._users[row['author_id']]
        joined = dict(row)
        joined['author_username'] = author['username']
        joined['author_name'] = author['name']
        return joined

    # --- Question operations ---

    def insert_question(self, title, contents, author_id):
        with self._lock:
            question_id = next(self._question_ids)
            now = _now()
            self._questions[question_id] = {
                'id': question_id,
                'title': title,
                'contents': contents,
                'author_id': author_id,
                'deleted': False,
                'created_at': now,
                'updated_at': now,
            }
            return question_id

    def get_question_by_id(self, question_id, lock=False):
        with self._lock:
            row = self._questions.get(question_id)
            return self._with_author(row) if row else None

    def get_questions(self, include_deleted=False):
        with self._lock:
            return [
                self._with_author(row)
                for _, row in sorted(self._questions.items())
                if include_deleted or not row['deleted']
            ]

    def update_question(self, question_id, title, contents):
        with self._lock:
            row = self._questions[question_id]
            row.update(title=title, contents=contents, updated_at=_now())

    def soft_delete_question(self, question_id):
        with self._lock:
            now = _now()
            self._questions[question_id].update(deleted=True, updated_at=now)
            for row in self._answers.values():
                if row['question_id'] == question_id and not row['deleted']:
                    row.update(deleted=True, updated_at=now)

    # --- Answer operations ---

    def insert_answer(self, question_id, contents, author_id):
        with self._lock:
            answer_id = next(self._answer_ids)
            now = _now()
            self._answers[answer_id] = {
                'id': answer_id,
                'question_id': question_id,
                'contents': contents,
                'author_id': author_id,
                'deleted': False,
                'created_at': now,
                'updated_at': now,
            }
            return answer_id

    def get_answer_by_id(self, answer_id):
        with self._lock:
            row = self._answers.get(answer_id)
            return self._with_author(row) if row else None

    def get_answers_by_question(self, question_id, include_deleted=False):
        with self._lock:
            return [
                self._with_author(row)
                for _, row in sorted(self._answers.items())
                if row['question_id'] == question_id and (include_deleted or not row['deleted'])
            ]

    def update_answer(self, answer_id, contents):
        with self._lock:
            self._answers[answer_id].update(contents=contents, updated_at=_now())

    def soft_delete_answer(self, answer_id):
        with self._lock:
            self._answers[answer_id].update(deleted=True, updated_at=_now())

    # --- Access logging ---

    def log_access(self, user_id, resource_type, resource_id, action, status, reason=None):
        with self._lock:
            self._access_logs.append({
                'id': next(self._log_ids),
                'user_id': user_id,
                'resource_type': resource_type,
                'resource_id': resource_id,
                'action': action,
                'status': status,
                'reason': reason,
                'timestamp': _now(),
            })

    def get_access_logs(self, limit=100):
        with self._lock:
            rows = []
            for entry in reversed(self._access_logs[-limit:] if limit > 0 else []):
                row = dict(entry)
                user = self._users.get(entry['user_id'])
                row['username'] = user['username'] if user else None
                rows.append(row)
            return rows
