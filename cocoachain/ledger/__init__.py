# Ledger Module
"""
In-process toy ledger for cocoa sales:
- Sale and Block records (frozen dataclasses)
- Pending pool batched into blocks
- Proof of Work with a fixed hex prefix
- Per-seller and overall sales aggregation
- Seller id derivation from wallet addresses
"""

from .blockchain import (
    Sale,
    Block,
    Blockchain,
    average_price_per_kg,
    GENESIS_NONCE,
    GENESIS_PREV_HASH,
    GENESIS_HASH,
    DEFAULT_PREFIX,
    MAX_NONCE,
)

from .sellers import (
    generate_seller_id,
    is_wallet_address,
)

from .summary import (
    seller_stats,
    top_sellers,
    summarize_sales,
)

__all__ = [
    # Blockchain
    'Sale',
    'Block',
    'Blockchain',
    'average_price_per_kg',
    'GENESIS_NONCE',
    'GENESIS_PREV_HASH',
    'GENESIS_HASH',
    'DEFAULT_PREFIX',
    'MAX_NONCE',
    # Sellers
    'generate_seller_id',
    'is_wallet_address',
    # Summary
    'seller_stats',
    'top_sellers',
    'summarize_sales',
]
