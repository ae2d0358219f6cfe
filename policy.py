"""
Ownership policy and deletion rules.

Pure functions over a caller and a loaded resource. A check returns None
when the operation is permitted, or the DenialReason that blocks it.
Authorship is compared by user id only; no role overrides these rules.
"""

from errors import DenialReason


def is_authenticated(caller):
    """Anonymous callers are None or Flask-Login's AnonymousUserMixin."""
    return caller is not None and bool(getattr(caller, 'is_authenticated', False))


def owns(caller, resource):
    return is_authenticated(caller) and caller.id == resource.author.id


def can_modify(caller, resource):
    """True iff caller is authenticated and wrote the resource."""
    return owns(caller, resource)


def can_update_question(caller, question):
    if not can_modify(caller, question):
        return DenialReason.OWNERSHIP
    return None


def can_delete_question(caller, question):
    """
    A question can be deleted only by its author, and only while every
    live answer under it was written by that same author. An empty answer
    set counts as all self-authored.
    """
    if not can_modify(caller, question):
        return DenialReason.OWNERSHIP
    for answer in question.active_answers:
        if answer.author.id != caller.id:
            return DenialReason.FOREIGN_ANSWER
    return None


def can_delete_answer(caller, answer):
    if not can_modify(caller, answer):
        return DenialReason.OWNERSHIP
    return None


can_update_answer = can_delete_answer
