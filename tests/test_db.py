"""
MySQLStore against a mocked mysql.connector connection.
"""

from unittest.mock import MagicMock, patch

import pytest
from mysql.connector import Error

from db import MySQLStore
from errors import StoreError

DB_CONFIG = {'host': 'db', 'user': 'qna', 'password': 'pw', 'database': 'qna_test', 'port': 3306}


@pytest.fixture
def conn():
    conn = MagicMock()
    conn.is_connected.return_value = True
    return conn


@pytest.fixture
def cursor(conn):
    cursor = MagicMock()
    conn.cursor.return_value = cursor
    return cursor


@pytest.fixture
def connect(conn):
    with patch('db.mysql.connector.connect', return_value=conn) as connect:
        yield connect


@pytest.fixture
def store():
    return MySQLStore(DB_CONFIG)


def test_insert_question_commits_and_returns_id(store, connect, conn, cursor):
    cursor.lastrowid = 7

    assert store.insert_question('title', 'contents', 1) == 7

    connect.assert_called_once_with(**DB_CONFIG)
    sql, params = cursor.execute.call_args[0]
    assert 'INSERT INTO questions' in sql
    assert params == ('title', 'contents', 1)
    conn.commit.assert_called_once()
    conn.close.assert_called_once()


def test_get_question_by_id_joins_author(store, connect, conn, cursor):
    cursor.fetchone.return_value = {'id': 1, 'author_username': 'javajigi'}

    row = store.get_question_by_id(1)

    assert row['author_username'] == 'javajigi'
    conn.cursor.assert_called_with(dictionary=True)
    sql, params = cursor.execute.call_args[0]
    assert 'JOIN users' in sql
    assert 'FOR UPDATE' not in sql
    assert params == (1,)


def test_get_question_by_id_lock(store, connect, cursor):
    store.get_question_by_id(1, lock=True)
    sql, _ = cursor.execute.call_args[0]
    assert sql.rstrip().endswith('FOR UPDATE')


def test_get_questions_filters_deleted(store, connect, cursor):
    cursor.fetchall.return_value = []
    store.get_questions()
    sql = cursor.execute.call_args[0][0]
    assert 'q.deleted = FALSE' in sql
    assert 'ORDER BY q.id' in sql

    store.get_questions(include_deleted=True)
    assert 'q.deleted = FALSE' not in cursor.execute.call_args[0][0]


def test_soft_delete_question_is_one_transaction(store, connect, conn, cursor):
    store.soft_delete_question(5)

    connect.assert_called_once()
    conn.start_transaction.assert_called_once()
    statements = [c[0][0] for c in cursor.execute.call_args_list]
    assert len(statements) == 2
    assert 'UPDATE questions SET deleted = TRUE' in statements[0]
    assert 'UPDATE answers SET deleted = TRUE' in statements[1]
    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()


def test_soft_delete_question_rolls_back_on_failure(store, connect, conn, cursor):
    cursor.execute.side_effect = [None, Error('answers table locked')]

    with pytest.raises(StoreError):
        store.soft_delete_question(5)

    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()


def test_calls_inside_transaction_share_connection(store, connect, conn, cursor):
    cursor.fetchone.return_value = None
    with store.transaction():
        store.get_question_by_id(1, lock=True)
        store.update_question(1, 'title', 'contents')

    connect.assert_called_once()
    # only the outer transaction commits
    conn.commit.assert_called_once()


def test_connection_error_wrapped(store):
    with patch('db.mysql.connector.connect', side_effect=Error('refused')):
        with pytest.raises(StoreError):
            store.get_user_by_username('javajigi')


def test_log_access_parameters(store, connect, cursor):
    store.log_access(2, 'question', 1, 'DELETE', 'DENIED', 'OWNERSHIP')
    sql, params = cursor.execute.call_args[0]
    assert 'INSERT INTO access_logs' in sql
    assert params == (2, 'question', 1, 'DELETE', 'DENIED', 'OWNERSHIP')
