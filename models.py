"""
Domain models: User for Flask-Login, Question and Answer for the forum.
Built from the dict rows returned by the store.
"""

from flask_login import UserMixin
from werkzeug.security import check_password_hash

from store import get_store


def _isoformat(value):
    return value.isoformat() if value is not None else None


class User(UserMixin):
    """
    User model compatible with Flask-Login.
    Two users are the same user when their numeric ids match.
    """

    def __init__(self, user_id, username, name=None, email=None, role='user', password_hash=None):
        self.id = user_id
        self.username = username
        self.name = name or username
        self.email = email
        self.role = role
        self.password_hash = password_hash

    @property
    def is_admin(self):
        """Check if user has admin role."""
        return self.role == 'admin'

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {'id': self.id, 'username': self.username, 'name': self.name}

    def __repr__(self):
        return f'<User {self.id} {self.username}>'

    @classmethod
    def from_row(cls, row):
        if not row:
            return None
        return cls(
            user_id=row['id'],
            username=row['username'],
            name=row.get('name'),
            email=row.get('email'),
            role=row.get('role', 'user'),
            password_hash=row.get('password_hash'),
        )

    @staticmethod
    def get(user_id):
        """
        Load user from the configured store by ID.
        Returns User instance or None.
        """
        if user_id is None:
            return None
        return User.from_row(get_store().get_user_by_id(int(user_id)))


def _author_from_row(row):
    return User(
        user_id=row['author_id'],
        username=row.get('author_username'),
        name=row.get('author_name'),
    )


class Answer:
    """Reply attached to exactly one question."""

    def __init__(self, answer_id, question_id, contents, author,
                 deleted=False, created_at=None, updated_at=None):
        self.id = answer_id
        self.question_id = question_id
        self.contents = contents
        self.author = author
        self.deleted = deleted
        self.created_at = created_at
        self.updated_at = updated_at

    def generate_resource_uri(self):
        return f'/api/answers/{self.id}'

    def to_dict(self):
        return {
            'id': self.id,
            'question_id': self.question_id,
            'contents': self.contents,
            'writer': self.author.to_dict(),
            'deleted': self.deleted,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }

    @classmethod
    def from_row(cls, row):
        return cls(
            answer_id=row['id'],
            question_id=row['question_id'],
            contents=row['contents'],
            author=_author_from_row(row),
            deleted=bool(row['deleted']),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )


class Question:
    """
    Top-level forum post. `answers` keeps insertion order and may
    include soft-deleted answers; `active_answers` filters them out.
    """

    def __init__(self, question_id, title, contents, author, answers=None,
                 deleted=False, created_at=None, updated_at=None):
        self.id = question_id
        self.title = title
        self.contents = contents
        self.author = author
        self.answers = list(answers or [])
        self.deleted = deleted
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def active_answers(self):
        return [answer for answer in self.answers if not answer.deleted]

    def generate_resource_uri(self):
        return f'/api/questions/{self.id}'

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'contents': self.contents,
            'writer': self.author.to_dict(),
            'answers': [answer.to_dict() for answer in self.active_answers],
            'deleted': self.deleted,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }

    @classmethod
    def from_row(cls, row, answer_rows=()):
        return cls(
            question_id=row['id'],
            title=row['title'],
            contents=row['contents'],
            author=_author_from_row(row),
            answers=[Answer.from_row(a) for a in answer_rows],
            deleted=bool(row['deleted']),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )
