'''
Assembles the Flask app: configuration, blueprints, JSON error handlers.
Does not start the server; used by run.py, WSGI servers and tests.
'''
# split_ledger/app_factory.py
from flask import Flask, jsonify
import os
from dotenv import load_dotenv

from split_ledger.schemas.error_type import ErrorType
from split_ledger.logger import get_logger

load_dotenv()

logger = get_logger(__name__)


def create_app(config_name='development'):
    app = Flask(__name__)

    secret_key = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    if isinstance(secret_key, bytes):
        secret_key = secret_key.decode('utf-8')
    app.config['SECRET_KEY'] = secret_key

    app.config['TESTING'] = config_name == 'testing'
    app.json.sort_keys = False

    from split_ledger.routes.inventory_split import inventory_split_bp
    app.register_blueprint(inventory_split_bp)

    register_error_handlers(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": ErrorType.NOT_FOUND.value, "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": ErrorType.VALIDATION_ERROR.value, "message": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Unhandled error: {getattr(error, 'original_exception', error)}")
        return jsonify({"error": ErrorType.INTERNAL_ERROR.value, "message": "Internal server error"}), 500
