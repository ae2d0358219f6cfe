"""
Q&A forum - questions and answers with ownership-based access control.
Flask JSON API with session and HTTP Basic auth via Flask-Login.
"""

import logging

from flask import Flask, jsonify
from flask_login import LoginManager
from werkzeug.exceptions import HTTPException

import config
from admin import admin_bp
from api import SERVICE_KEY, api_bp
from auth import auth_bp, load_user_from_request
from errors import AuthRequired, QnAError, StoreError
from models import User
from service import QuestionService
from store import EXTENSION_KEY, create_store

logger = logging.getLogger(__name__)


def configure_logging(level):
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )


def register_error_handlers(app):
    @app.errorhandler(QnAError)
    def handle_qna_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(StoreError)
    def handle_store_error(e):
        logger.error("Store failure: %s", e)
        return jsonify({'error': 'STORE_ERROR', 'message': 'Storage unavailable.'}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        """403/404/405 and friends as JSON instead of HTML pages."""
        if e.code is None or e.code < 400:
            return e
        code = (e.name or 'error').upper().replace(' ', '_')
        return jsonify({'error': code, 'message': e.description}), e.code


def init_login(app):
    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return User.get(user_id)

    login_manager.request_loader(load_user_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        # no 401/403 distinction for protected endpoints
        return jsonify(AuthRequired().to_dict()), AuthRequired.status_code

    return login_manager


def create_app(overrides=None, store=None):
    """
    Build the application. `overrides` updates Flask config; `store`
    replaces the backend chosen by STORE_BACKEND.
    """
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.SECRET_KEY,
        MAX_CONTENT_LENGTH=config.MAX_CONTENT_LENGTH,
        STORE_BACKEND=config.STORE_BACKEND,
        DB_CONFIG=config.DB_CONFIG,
        PASSWORD_HASH_METHOD=config.PASSWORD_HASH_METHOD,
        ACCESS_LOG_LIMIT=config.ACCESS_LOG_LIMIT,
        LOG_LEVEL=config.LOG_LEVEL,
    )
    if overrides:
        app.config.update(overrides)

    app.json.ensure_ascii = False
    configure_logging(app.config['LOG_LEVEL'])

    if store is None:
        store = create_store(app.config['STORE_BACKEND'], app.config['DB_CONFIG'])
    app.extensions[EXTENSION_KEY] = store
    app.extensions[SERVICE_KEY] = QuestionService(store)

    init_login(app)
    register_error_handlers(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(admin_bp)
    return app


app = create_app()


def main():
    """Initialize schema, seed default users and run the Flask app."""
    from seed_data import seed

    store = app.extensions[EXTENSION_KEY]
    store.init_schema()
    seed(store, hash_method=app.config['PASSWORD_HASH_METHOD'])

    logger.info("Q&A forum running at http://127.0.0.1:5000")
    app.run(debug=True, host='0.0.0.0', port=5000)


if __name__ == '__main__':
    main()
