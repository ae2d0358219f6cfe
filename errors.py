"""
Error taxonomy for the Q&A API.
Every failure carries the HTTP status it is reported with.
"""

from enum import Enum


class DenialReason(Enum):
    """Why an authorization check failed."""
    OWNERSHIP = 'OWNERSHIP'
    FOREIGN_ANSWER = 'FOREIGN_ANSWER'


class QnAError(Exception):
    """Base class for errors reported to the client."""
    status_code = 500
    code = 'INTERNAL_ERROR'

    def __init__(self, message=None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self):
        return 'Internal server error.'

    def to_dict(self):
        return {'error': self.code, 'message': self.message}


class AuthRequired(QnAError):
    """No credentials were supplied. Reported as 403, not 401."""
    status_code = 403
    code = 'AUTH_REQUIRED'

    def default_message(self):
        return 'Login required.'


class Forbidden(QnAError):
    """Authenticated caller is not allowed to touch the resource."""
    status_code = 403

    def __init__(self, reason, message=None):
        self.reason = reason
        super().__init__(message)

    @property
    def code(self):
        return f'FORBIDDEN_{self.reason.value}'

    def default_message(self):
        if self.reason is DenialReason.FOREIGN_ANSWER:
            return 'Question has answers written by other users.'
        return 'Only the author can modify this resource.'


class AdminRequired(QnAError):
    """Authenticated caller lacks the admin role."""
    status_code = 403
    code = 'ADMIN_REQUIRED'

    def default_message(self):
        return 'Admin access required.'


class NotFound(QnAError):
    status_code = 404
    code = 'NOT_FOUND'

    def default_message(self):
        return 'Resource not found.'


class InvalidPayload(QnAError):
    status_code = 400
    code = 'INVALID_PAYLOAD'

    def default_message(self):
        return 'Invalid request body.'


class StoreError(Exception):
    """Storage backend failure. Not a client error; surfaces as 500."""
