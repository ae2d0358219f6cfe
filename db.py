"""
Database connection and table management.
Uses mysql-connector-python with parameterized queries to prevent SQL injection.
"""

import logging
import threading
from contextlib import contextmanager

import mysql.connector
from mysql.connector import Error

from config import DB_CONFIG
from errors import StoreError

logger = logging.getLogger(__name__)

QUESTION_SELECT = """
    SELECT q.id, q.title, q.contents, q.author_id, q.deleted, q.created_at, q.updated_at,
           u.username AS author_username, u.name AS author_name
    FROM questions q JOIN users u ON q.author_id = u.id
"""

ANSWER_SELECT = """
    SELECT a.id, a.question_id, a.contents, a.author_id, a.deleted, a.created_at, a.updated_at,
           u.username AS author_username, u.name AS author_name
    FROM answers a JOIN users u ON a.author_id = u.id
"""


class MySQLStore:
    """
    Question/answer storage on MySQL.
    Each call opens its own connection unless it runs inside transaction(),
    in which case every statement shares the transaction's connection.
    """

    def __init__(self, db_config=None):
        self.db_config = dict(db_config or DB_CONFIG)
        self._local = threading.local()

    def _active_connection(self):
        return getattr(self._local, 'conn', None)

    @contextmanager
    def get_db_connection(self):
        """
        Context manager for database connections.
        Ensures proper connection cleanup.
        """
        active = self._active_connection()
        if active is not None:
            yield active
            return
        conn = None
        try:
            conn = mysql.connector.connect(**self.db_config)
            yield conn
        except Error as e:
            logger.error("Database error: %s", e)
            raise StoreError(f"Database error: {e}") from e
        finally:
            if conn and conn.is_connected():
                conn.close()

    @contextmanager
    def transaction(self):
        """Run the enclosed store calls atomically on one connection."""
        if self._active_connection() is not None:
            yield
            return
        with self.get_db_connection() as conn:
            conn.start_transaction()
            self._local.conn = conn
            try:
                yield
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                self._local.conn = None

    def _commit(self, conn):
        # inside transaction() the outermost block commits
        if self._active_connection() is None:
            conn.commit()

    def init_schema(self):
        """
        Create database and tables if they don't exist.
        """
        config_no_db = {k: v for k, v in self.db_config.items() if k != 'database'}

        try:
            conn = mysql.connector.connect(**config_no_db)
            cursor = conn.cursor()
            cursor.execute(f"CREATE DATABASE IF NOT EXISTS `{self.db_config['database']}`")
            conn.commit()
            cursor.close()
            conn.close()
        except Error as e:
            raise StoreError(f"Failed to create database: {e}") from e

        with self.get_db_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INT AUTO_INCREMENT PRIMARY KEY,
                    username VARCHAR(20) UNIQUE NOT NULL,
                    name VARCHAR(50) NOT NULL,
                    email VARCHAR(150) UNIQUE NOT NULL,
                    password_hash VARCHAR(255) NOT NULL,
                    role ENUM('admin','user') NOT NULL DEFAULT 'user'
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS questions (
                    id INT AUTO_INCREMENT PRIMARY KEY,
                    title VARCHAR(100) NOT NULL,
                    contents TEXT NOT NULL,
                    author_id INT NOT NULL,
                    deleted BOOLEAN NOT NULL DEFAULT FALSE,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
                    FOREIGN KEY (author_id) REFERENCES users(id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS answers (
                    id INT AUTO_INCREMENT PRIMARY KEY,
                    question_id INT NOT NULL,
                    contents TEXT NOT NULL,
                    author_id INT NOT NULL,
                    deleted BOOLEAN NOT NULL DEFAULT FALSE,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
                    FOREIGN KEY (question_id) REFERENCES questions(id),
                    FOREIGN KEY (author_id) REFERENCES users(id)
                )
            """)

            # Audit trail: every mutation attempt, allowed or denied
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS access_logs (
                    id INT AUTO_INCREMENT PRIMARY KEY,
                    user_id INT NULL,
                    resource_type VARCHAR(20) NOT NULL,
                    resource_id INT NULL,
                    action VARCHAR(20) NOT NULL,
                    status VARCHAR(20) NOT NULL,
                    reason VARCHAR(50) NULL,
                    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            self._commit(conn)
            cursor.close()

    # --- User operations ---

    def _fetch_user(self, column, value):
        with self.get_db_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute(
                f"SELECT id, username, name, email, password_hash, role FROM users WHERE {column} = %s",
                (value,)
            )
            row = cursor.fetchone()
            cursor.close()
            return row

    def get_user_by_id(self, user_id):
        """Fetch user by ID. Returns dict or None."""
        return self._fetch_user('id', user_id)

    def get_user_by_username(self, username):
        return self._fetch_user('username', username)

    def get_user_by_email(self, email):
        return self._fetch_user('email', email)

    def create_user(self, username, name, email, password_hash, role='user'):
        """Create new user. Returns user ID."""
        with self.get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO users (username, name, email, password_hash, role)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (username, name, email, password_hash, role)
            )
            self._commit(conn)
            user_id = cursor.lastrowid
            cursor.close()
            return user_id

    def get_all_users(self):
        with self.get_db_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute("SELECT id, username, name, email, role FROM users ORDER BY id")
            rows = cursor.fetchall()
            cursor.close()
            return rows

    # --- Question operations ---

    def insert_question(self, title, contents, author_id):
        """Insert question. Returns question ID."""
        with self.get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO questions (title, contents, author_id) VALUES (%s, %s, %s)",
                (title, contents, author_id)
            )
            self._commit(conn)
            question_id = cursor.lastrowid
            cursor.close()
            return question_id

    def get_question_by_id(self, question_id, lock=False):
        """
        Fetch question row by ID, deleted or not. Returns dict or None.
        lock=True adds FOR UPDATE; only meaningful inside transaction().
        """
        query = QUESTION_SELECT + " WHERE q.id = %s"
        if lock:
            query += " FOR UPDATE"
        with self.get_db_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute(query, (question_id,))
            row = cursor.fetchone()
            cursor.close()
            return row

    def get_questions(self, include_deleted=False):
        """Fetch questions in insertion order."""
        query = QUESTION_SELECT
        if not include_deleted:
            query += " WHERE q.deleted = FALSE"
        query += " ORDER BY q.id"
        with self.get_db_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute(query)
            rows = cursor.fetchall()
            cursor.close()
            return rows

    def update_question(self, question_id, title, contents):
        with self.get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE questions SET title = %s, contents = %s, updated_at = NOW() WHERE id = %s",
                (title, contents, question_id)
            )
            self._commit(conn)
            cursor.close()

    def soft_delete_question(self, question_id):
        """Mark a question and all of its answers deleted in one transaction."""
        with self.transaction():
            with self.get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE questions SET deleted = TRUE, updated_at = NOW() WHERE id = %s",
                    (question_id,)
                )
                cursor.execute(
                    """
                    UPDATE answers SET deleted = TRUE, updated_at = NOW()
                    WHERE question_id = %s AND deleted = FALSE
                    """,
                    (question_id,)
                )
                cursor.close()

    # --- Answer operations ---

    def insert_answer(self, question_id, contents, author_id):
        """Insert answer. Returns answer ID."""
        with self.get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO answers (question_id, contents, author_id) VALUES (%s, %s, %s)",
                (question_id, contents, author_id)
            )
            self._commit(conn)
            answer_id = cursor.lastrowid
            cursor.close()
            return answer_id

    def get_answer_by_id(self, answer_id):
        with self.get_db_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute(ANSWER_SELECT + " WHERE a.id = %s", (answer_id,))
            row = cursor.fetchone()
            cursor.close()
            return row

    def get_answers_by_question(self, question_id, include_deleted=False):
        """Fetch answers of a question in insertion order."""
        query = ANSWER_SELECT + " WHERE a.question_id = %s"
        if not include_deleted:
            query += " AND a.deleted = FALSE"
        query += " ORDER BY a.id"
        with self.get_db_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute(query, (question_id,))
            rows = cursor.fetchall()
            cursor.close()
            return rows

    def update_answer(self, answer_id, contents):
        with self.get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE answers SET contents = %s, updated_at = NOW() WHERE id = %s",
                (contents, answer_id)
            )
            self._commit(conn)
            cursor.close()

    def soft_delete_answer(self, answer_id):
        with self.get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE answers SET deleted = TRUE, updated_at = NOW() WHERE id = %s",
                (answer_id,)
            )
            self._commit(conn)
            cursor.close()

    # --- Access logging (audit trail) ---

    def log_access(self, user_id, resource_type, resource_id, action, status, reason=None):
        """
        Log a mutation attempt.
        status: 'ALLOWED' | 'DENIED'
        action: 'CREATE' | 'UPDATE' | 'DELETE'
        """
        with self.get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO access_logs (user_id, resource_type, resource_id, action, status, reason)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (user_id, resource_type, resource_id, action, status, reason)
            )
            self._commit(conn)
            cursor.close()

    def get_access_logs(self, limit=100):
        """Fetch recent access logs for admin audit view."""
        with self.get_db_connection() as conn:
            cursor = conn.cursor(dictionary=True)
            cursor.execute(
                """
                SELECT al.id, al.user_id, al.resource_type, al.resource_id, al.action,
                       al.status, al.reason, al.timestamp, u.username
                FROM access_logs al
                LEFT JOIN users u ON al.user_id = u.id
                ORDER BY al.id DESC LIMIT %s
                """,
                (limit,)
            )
            rows = cursor.fetchall()
            cursor.close()
            return rows
