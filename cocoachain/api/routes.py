"""
REST endpoints.

Handlers validate input, make one or more backend calls and shape the JSON
response. Errors propagate to the handlers registered in `app.py`.
"""

from flask import Blueprint, current_app, jsonify, request

from .. import config
from ..backends.base import SalesLedger
from ..ledger.summary import summarize_sales
from ..log import get_logger
from .validation import validate_sale_payload

logger = get_logger("api")

api_bp = Blueprint("cocoachain", __name__)

LEDGER_EXTENSION = "cocoachain.ledger"

ENDPOINTS = {
    "GET /": "API info",
    "POST /register": "Register as seller (returns sellerId)",
    "POST /sale": "Record a sale",
    "GET /sale": "Example body for POST /sale",
    "GET /sales": "Get all sales",
    "GET /seller/:sellerId": "Get seller details",
    "GET /sales-summary": "Get sales statistics",
    "GET /blockchain": "Get blockchain info",
    "GET /mine": "Mine pending sales (toy ledger) or explain on-chain finality",
}


def get_ledger() -> SalesLedger:
    """Backend bound to the current app."""
    return current_app.extensions[LEDGER_EXTENSION]


@api_bp.route("/", methods=["GET"])
def index():
    return jsonify({
        'message': "CocoaChain API v1.0 is running",
        'backend': get_ledger().name,
        'endpoints': ENDPOINTS,
    })


@api_bp.route("/register", methods=["POST"])
def register():
    """Register the signer wallet as a seller and return its seller id."""
    registration = get_ledger().register_seller()
    return jsonify({
        'success': True,
        'sellerId': registration.seller_id,
        'walletAddress': registration.wallet_address,
        'transactionHash': registration.transaction_hash,
        'message': "Seller registered successfully",
    })


@api_bp.route("/sale", methods=["POST"])
def record_sale():
    """Record a sale; a seller may record any number of them."""
    sale = validate_sale_payload(request.get_json(silent=True))
    receipt = get_ledger().record_sale(sale)

    body = {
        'success': True,
        'transactionHash': receipt.transaction_hash,
        'message': "Sale recorded successfully",
        'data': sale.to_dict(),
    }
    if receipt.block_index is not None:
        body['blockIndex'] = receipt.block_index
        body['note'] = f"Sale will be added in block {receipt.block_index}"
    logger.info("Recorded sale for %s: %s kg at %s",
                sale.seller_id, sale.quantity_kg, sale.price)
    return jsonify(body)


@api_bp.route("/sale", methods=["GET"])
def sale_usage():
    return jsonify({
        'message': "Use POST /sale to record a sale",
        'body': {
            'sellerId': "SELLER_ABC123",
            'buyerName': "John Doe",
            'quantityKg': 100,
            'price': 50,
        },
    })


@api_bp.route("/sales", methods=["GET"])
def list_sales():
    sales = get_ledger().list_sales()
    return jsonify({
        'success': True,
        'totalSales': len(sales),
        'sales': [sale.to_dict() for sale in sales],
    })


@api_bp.route("/seller/<seller_id>", methods=["GET"])
def seller_details(seller_id):
    """Seller totals plus the most recent sales."""
    details, sales = get_ledger().get_seller(seller_id)
    recent = sales[-config.RECENT_SALES_LIMIT:]
    return jsonify({
        'success': True,
        'seller': details.to_dict(),
        'salesCount': len(sales),
        'recentSales': [sale.to_dict(include_seller=False) for sale in recent],
    })


@api_bp.route("/sales-summary", methods=["GET"])
def sales_summary():
    ledger = get_ledger()
    sales = ledger.list_sales()
    body = summarize_sales(sales, ledger.sellers_count())
    return jsonify({'success': True, **body})


@api_bp.route("/blockchain", methods=["GET"])
def blockchain_info():
    return jsonify({
        'success': True,
        'blockchain': get_ledger().ledger_info(),
    })


@api_bp.route("/mine", methods=["GET"])
def mine():
    return jsonify(get_ledger().mine())
