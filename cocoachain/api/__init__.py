# API Module
"""
REST service (Flask):
- Application factory with CORS and JSON error handlers - app.py
- Seller, sale and summary endpoints - routes.py
- Sale payload validation - validation.py
"""

from .app import create_app, register_error_handlers
from .routes import api_bp, get_ledger
from .validation import (
    REQUIRED_SALE_FIELDS,
    parse_number,
    parse_positive_number,
    validate_sale_payload,
)

__all__ = [
    'create_app',
    'register_error_handlers',
    'api_bp',
    'get_ledger',
    'REQUIRED_SALE_FIELDS',
    'parse_number',
    'parse_positive_number',
    'validate_sale_payload',
]
