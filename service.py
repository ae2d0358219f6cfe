"""
Question/answer orchestration.

Resolves the caller, loads the target from the store, applies the
ownership policy and deletion rules, then writes. Every mutation attempt
is recorded in the access log, allowed or denied.
"""

import logging

from config import MAX_TITLE_LENGTH
from errors import AuthRequired, Forbidden, InvalidPayload, NotFound, StoreError
from models import Answer, Question
from policy import (
    can_delete_answer,
    can_delete_question,
    can_update_answer,
    can_update_question,
    is_authenticated,
)

logger = logging.getLogger(__name__)

ALLOWED = 'ALLOWED'
DENIED = 'DENIED'


def _require_text(value, field, max_length=None):
    if not isinstance(value, str) or not value.strip():
        raise InvalidPayload(f"'{field}' must be a non-empty string.")
    if max_length is not None and len(value) > max_length:
        raise InvalidPayload(f"'{field}' must be at most {max_length} characters.")
    return value


class QuestionService:
    """Thin layer between the HTTP API and the store."""

    def __init__(self, store):
        self.store = store

    # --- audit ---

    def _audit(self, caller, resource_type, resource_id, action, reason=None):
        user_id = caller.id if is_authenticated(caller) else None
        status = DENIED if reason is not None else ALLOWED
        reason_name = reason.value if hasattr(reason, 'value') else reason
        if status == DENIED:
            logger.warning(
                "%s %s %s denied for user_id=%s: %s",
                action, resource_type, resource_id, user_id, reason_name,
            )
        else:
            logger.info("%s %s %s by user_id=%s", action, resource_type, resource_id, user_id)
        # the resource change is already committed; an audit failure is logged, not raised
        try:
            self.store.log_access(user_id, resource_type, resource_id, action, status, reason_name)
        except StoreError as e:
            logger.error(
                "Audit write failed for %s %s %s (%s): %s",
                action, resource_type, resource_id, status, e,
            )

    def _require_caller(self, caller, resource_type, resource_id, action):
        if not is_authenticated(caller):
            self._audit(caller, resource_type, resource_id, action, 'AUTH_REQUIRED')
            raise AuthRequired()

    # --- loading ---

    def _load_question(self, question_id, lock=False):
        row = self.store.get_question_by_id(question_id, lock=lock)
        if not row or row['deleted']:
            raise NotFound(f"Question {question_id} not found.")
        return Question.from_row(row, self.store.get_answers_by_question(question_id))

    def _load_answer(self, answer_id):
        row = self.store.get_answer_by_id(answer_id)
        if not row or row['deleted']:
            raise NotFound(f"Answer {answer_id} not found.")
        return Answer.from_row(row)

    # --- questions ---

    def list_questions(self):
        """Live questions in insertion order."""
        questions = []
        for row in self.store.get_questions():
            answers = self.store.get_answers_by_question(row['id'])
            questions.append(Question.from_row(row, answers))
        return questions

    def get_question(self, question_id):
        return self._load_question(question_id)

    def create_question(self, caller, title, contents):
        self._require_caller(caller, 'question', None, 'CREATE')
        _require_text(title, 'title', MAX_TITLE_LENGTH)
        _require_text(contents, 'contents')
        question_id = self.store.insert_question(title, contents, caller.id)
        self._audit(caller, 'question', question_id, 'CREATE')
        return self._load_question(question_id)

    def update_question(self, caller, question_id, title, contents):
        self._require_caller(caller, 'question', question_id, 'UPDATE')
        _require_text(title, 'title', MAX_TITLE_LENGTH)
        _require_text(contents, 'contents')
        with self.store.transaction():
            question = self._load_question(question_id, lock=True)
            reason = can_update_question(caller, question)
            if reason is None:
                self.store.update_question(question_id, title, contents)
        self._audit(caller, 'question', question_id, 'UPDATE', reason)
        if reason is not None:
            raise Forbidden(reason)
        return self._load_question(question_id)

    def delete_question(self, caller, question_id):
        """
        Soft-delete a question together with its answers. The answer
        snapshot the rule is evaluated on is read under the same store
        transaction as the write.
        """
        self._require_caller(caller, 'question', question_id, 'DELETE')
        with self.store.transaction():
            question = self._load_question(question_id, lock=True)
            reason = can_delete_question(caller, question)
            if reason is None:
                self.store.soft_delete_question(question_id)
        self._audit(caller, 'question', question_id, 'DELETE', reason)
        if reason is not None:
            raise Forbidden(reason)

    # --- answers ---

    def list_answers(self, question_id):
        return self._load_question(question_id).active_answers

    def get_answer(self, answer_id):
        return self._load_answer(answer_id)

    def create_answer(self, caller, question_id, contents):
        self._require_caller(caller, 'answer', None, 'CREATE')
        _require_text(contents, 'contents')
        with self.store.transaction():
            self._load_question(question_id, lock=True)
            answer_id = self.store.insert_answer(question_id, contents, caller.id)
        self._audit(caller, 'answer', answer_id, 'CREATE')
        return self._load_answer(answer_id)

    def update_answer(self, caller, answer_id, contents):
        self._require_caller(caller, 'answer', answer_id, 'UPDATE')
        _require_text(contents, 'contents')
        with self.store.transaction():
            answer = self._load_answer(answer_id)
            reason = can_update_answer(caller, answer)
            if reason is None:
                self.store.update_answer(answer_id, contents)
        self._audit(caller, 'answer', answer_id, 'UPDATE', reason)
        if reason is not None:
            raise Forbidden(reason)
        return self._load_answer(answer_id)

    def delete_answer(self, caller, answer_id):
        self._require_caller(caller, 'answer', answer_id, 'DELETE')
        with self.store.transaction():
            answer = self._load_answer(answer_id)
            reason = can_delete_answer(caller, answer)
            if reason is None:
                self.store.soft_delete_answer(answer_id)
        self._audit(caller, 'answer', answer_id, 'DELETE', reason)
        if reason is not None:
            raise Forbidden(reason)
