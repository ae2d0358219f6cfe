"""
Database and application configuration.
Store sensitive config in environment variables.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# MySQL Database Configuration
DB_CONFIG = {
    'host': os.getenv('DB_HOST', 'localhost'),
    'user': os.getenv('DB_USER'),
    'password': os.getenv('DB_PASSWORD'),
    'database': os.getenv('DB_NAME', 'qna_forum'),
    'port': int(os.getenv('DB_PORT', 3306)),
    'autocommit': True,
}

# 'mysql' for the real database, 'memory' for a throwaway in-process store
STORE_BACKEND = os.getenv('STORE_BACKEND', 'mysql')

# Flask configuration
SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 1024 * 1024))

# Werkzeug hash method for stored passwords
PASSWORD_HASH_METHOD = os.getenv('PASSWORD_HASH_METHOD', 'scrypt')

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# Rows returned by the admin audit view
ACCESS_LOG_LIMIT = int(os.getenv('ACCESS_LOG_LIMIT', 100))

# Question title column width
MAX_TITLE_LENGTH = 100
