"""
Sales aggregation shared by both ledger backends.
"""

from typing import Any, Dict, Iterable, List

from .. import config
from .blockchain import average_price_per_kg


def seller_stats(sales: Iterable) -> Dict[str, Dict[str, float]]:
    """
    Per-seller sale count, quantity and revenue.

    Accepts any objects with seller_id, quantity_kg and price attributes,
    so toy-ledger sales and contract sale records aggregate the same way.
    """
    stats: Dict[str, Dict[str, float]] = {}
    for sale in sales:
        quantity = sale.quantity_kg
        revenue = sale.price * quantity
        entry = stats.setdefault(sale.seller_id, {'sales': 0, 'quantity': 0, 'revenue': 0})
        entry['sales'] += 1
        entry['quantity'] += quantity
        entry['revenue'] += revenue
    return stats


def top_sellers(stats: Dict[str, Dict[str, float]],
                limit: int = config.TOP_SELLERS_LIMIT) -> List[Dict[str, Any]]:
    """Sellers ordered by revenue, highest first."""
    ranked = sorted(stats.items(), key=lambda item: item[1]['revenue'], reverse=True)
    return [{'sellerId': seller_id, **entry} for seller_id, entry in ranked[:limit]]


def summarize_sales(sales: Iterable, sellers_count: int,
                    limit: int = config.TOP_SELLERS_LIMIT) -> Dict[str, Any]:
    """
    Build the `/sales-summary` body (minus the success flag).

    Overall totals are the sums of the per-seller totals.
    """
    sales = list(sales)
    stats = seller_stats(sales)
    total_cocoa = sum(entry['quantity'] for entry in stats.values())
    total_revenue = sum(entry['revenue'] for entry in stats.values())

    return {
        'summary': {
            'totalSales': len(sales),
            'totalSellers': sellers_count,
            'totalCocoaSold': total_cocoa,
            'totalRevenue': total_revenue,
            'averagePricePerKg': average_price_per_kg(total_revenue, total_cocoa),
        },
        'topSellers': top_sellers(stats, limit),
    }
