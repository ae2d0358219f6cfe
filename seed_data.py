"""
Seed data for the Q&A forum.
Creates the schema, the default users and one question per user.
Safe to run repeatedly: existing users and questions are left alone.
"""

import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from werkzeug.security import generate_password_hash

from config import DB_CONFIG, PASSWORD_HASH_METHOD, STORE_BACKEND

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = os.getenv('SEED_PASSWORD', 'password')

DEFAULT_USERS = [
    # username, name, email, role
    ('javajigi', '자바지기', 'javajigi@slipp.net', 'user'),
    ('sanjigi', '산지기', 'sanjigi@slipp.net', 'user'),
    ('admin', 'Admin', 'admin@qna.local', 'admin'),
]

DEFAULT_QUESTIONS = [
    # author, title, contents
    ('javajigi', '국내에서 Ruby on Rails와 Play가 활성화되기 힘든 이유는 뭘까?',
     'Ruby on Rails(이하 RoR)는 2006년 즈음에 정말 뜨겁게 달아올랐다가 금방 가라 앉았다.'),
    ('sanjigi', 'runtime 에 reflect 발동 주체 객체가 뭔지 알 방법이 있을까요?',
     '설계를 희한하게 하는 바람에 꼬인 문제같기도 하다.'),
]


def seed(store, password=DEFAULT_PASSWORD, hash_method=PASSWORD_HASH_METHOD):
    """
    Insert default users and questions that are missing.
    Returns a dict of username -> user id.
    """
    user_ids = {}
    for username, name, email, role in DEFAULT_USERS:
        row = store.get_user_by_username(username)
        if row:
            user_ids[username] = row['id']
            continue
        password_hash = generate_password_hash(password, method=hash_method)
        user_ids[username] = store.create_user(username, name, email, password_hash, role=role)
        logger.info("Seeded user %s", username)

    if not store.get_questions(include_deleted=True):
        for author, title, contents in DEFAULT_QUESTIONS:
            store.insert_question(title, contents, user_ids[author])
        logger.info("Seeded %d questions", len(DEFAULT_QUESTIONS))
    return user_ids


def main():
    """Standalone execution: python seed_data.py"""
    from store import create_store

    logging.basicConfig(level=logging.INFO)
    store = create_store(STORE_BACKEND, DB_CONFIG)
    try:
        store.init_schema()
        seed(store)
        logger.info("Seeding complete.")
    except Exception as e:
        logger.error("Seeding failed: %s", e)
        sys.exit(1)


if __name__ == '__main__':
    main()
