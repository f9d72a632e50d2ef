"""
Backend interface and the records that cross it.

The REST layer only talks to a `SalesLedger`; whether sales end up in the
deployed smart contract or in the in-process toy ledger is decided when
the app is built.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


def format_amount(value) -> str:
    """Render a quantity or price the way uint256.toString() would."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def iso_timestamp(epoch_ms: int) -> str:
    """Epoch milliseconds as an ISO-8601 UTC string with millisecond precision."""
    dt = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{dt.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class SaleRequest:
    """A validated `POST /sale` body."""
    seller_id: str
    buyer_name: str
    quantity_kg: float
    price: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sellerId': self.seller_id,
            'buyerName': self.buyer_name,
            'quantityKg': self.quantity_kg,
            'price': self.price,
        }


@dataclass(frozen=True)
class SaleRecord:
    """A recorded sale as read back from a ledger."""
    sale_id: str
    seller_id: str
    buyer_name: str
    quantity_kg: float
    price: float
    timestamp_ms: int

    def to_dict(self, include_seller: bool = True) -> Dict[str, Any]:
        data = {'saleId': self.sale_id}
        if include_seller:
            data['sellerId'] = self.seller_id
        data.update({
            'buyerName': self.buyer_name,
            'quantityKg': format_amount(self.quantity_kg),
            'price': format_amount(self.price),
            'timestamp': iso_timestamp(self.timestamp_ms),
        })
        return data


@dataclass(frozen=True)
class SellerDetails:
    """Seller identity and running totals."""
    seller_id: str
    wallet_address: str
    total_sales: int
    total_quantity: float
    total_revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sellerId': self.seller_id,
            'walletAddress': self.wallet_address,
            'totalSales': format_amount(self.total_sales),
            'totalQuantity': format_amount(self.total_quantity),
            'totalRevenue': format_amount(self.total_revenue),
        }


@dataclass(frozen=True)
class Registration:
    """Result of registering the signer wallet as a seller."""
    seller_id: str
    wallet_address: str
    transaction_hash: Optional[str] = None


@dataclass(frozen=True)
class SaleReceipt:
    """Where a recorded sale landed."""
    sale: SaleRequest
    transaction_hash: Optional[str] = None
    block_index: Optional[int] = None


class SalesLedger(ABC):
    """Storage backend behind the REST service."""

    name = "abstract"

    @abstractmethod
    def register_seller(self) -> Registration:
        """Register the signer wallet as a seller."""

    @abstractmethod
    def is_seller_registered(self, seller_id: str) -> bool:
        """Whether the seller id has been registered."""

    @abstractmethod
    def record_sale(self, sale: SaleRequest) -> SaleReceipt:
        """
        Record a sale for a registered seller.

        Raises:
            SellerNotRegisteredError: If the seller was never registered
        """

    @abstractmethod
    def list_sales(self) -> List[SaleRecord]:
        """Every recorded sale, oldest first."""

    @abstractmethod
    def get_seller(self, seller_id: str) -> Tuple[SellerDetails, List[SaleRecord]]:
        """Seller totals and that seller's sales, oldest first."""

    @abstractmethod
    def sellers_count(self) -> int:
        """Number of registered sellers."""

    @abstractmethod
    def ledger_info(self) -> Dict[str, Any]:
        """Ledger-wide totals for `GET /blockchain`."""

    @abstractmethod
    def mine(self) -> Dict[str, Any]:
        """Body for `GET /mine`."""
