"""
Flask application factory for the CocoaChain REST service.
"""

from typing import Any, Mapping, Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .. import config
from ..backends import SalesLedger, create_ledger
from ..errors import CocoaChainError
from ..log import configure_logging, get_logger
from .routes import LEDGER_EXTENSION, api_bp

logger = get_logger("api")


def create_app(
    test_config: Optional[Mapping[str, Any]] = None,
    ledger: Optional[SalesLedger] = None
) -> Flask:
    """
    Build the app.

    Args:
        test_config: Overrides for any setting in `config.as_dict()`
        ledger: Backend to serve; built from BACKEND when omitted

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    app.config.update(config.as_dict())
    if test_config:
        app.config.update(test_config)

    configure_logging(app.config['LOG_LEVEL'])
    CORS(app)

    app.extensions[LEDGER_EXTENSION] = ledger or create_ledger(app.config)
    app.register_blueprint(api_bp)
    register_error_handlers(app)

    logger.info("CocoaChain API using %s backend", app.extensions[LEDGER_EXTENSION].name)
    return app


def register_error_handlers(app: Flask) -> None:
    """Turn every failure into a JSON {"error": ...} response."""

    @app.errorhandler(CocoaChainError)
    def handle_cocoachain_error(exc: CocoaChainError):
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        else:
            logger.warning("Rejected request: %s", exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({'error': exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        logger.exception("Unhandled error")
        return jsonify({'error': str(exc)}), 500
