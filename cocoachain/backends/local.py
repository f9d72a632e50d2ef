"""
Local Ledger Backend

Runs the REST service on the in-process toy ledger instead of the smart
contract. Sellers are kept in memory next to the chain; a sale becomes
visible to the read endpoints once `GET /mine` batches it into a block.
"""

import threading
from typing import Any, Dict, List, Optional, Tuple

from eth_account import Account

from ..errors import SellerNotFoundError, SellerNotRegisteredError
from ..ledger.blockchain import Blockchain, Sale
from ..ledger.sellers import generate_seller_id
from ..log import get_logger
from .base import (
    Registration,
    SaleReceipt,
    SaleRecord,
    SaleRequest,
    SalesLedger,
    SellerDetails,
    format_amount,
)

logger = get_logger("local")


class LocalLedger(SalesLedger):
    """
    `SalesLedger` backed by a `Blockchain`.

    All chain access happens under one lock; Flask may serve requests
    from several threads.
    """

    name = "local"

    def __init__(
        self,
        blockchain: Optional[Blockchain] = None,
        wallet_address: Optional[str] = None
    ):
        """
        Args:
            blockchain: Ledger to use (a fresh one by default)
            wallet_address: Signer wallet; a new account is generated if omitted
        """
        self.blockchain = blockchain or Blockchain()
        self.wallet_address = wallet_address or Account.create().address
        self._sellers: Dict[str, str] = {}  # seller id -> wallet address
        self._lock = threading.Lock()

    def register_seller(self) -> Registration:
        seller_id = generate_seller_id(self.wallet_address)
        with self._lock:
            self._sellers[seller_id] = self.wallet_address
        logger.info("Registered seller %s for wallet %s", seller_id, self.wallet_address)
        return Registration(seller_id=seller_id, wallet_address=self.wallet_address)

    def is_seller_registered(self, seller_id: str) -> bool:
        with self._lock:
            return seller_id in self._sellers

    def record_sale(self, sale: SaleRequest) -> SaleReceipt:
        with self._lock:
            if sale.seller_id not in self._sellers:
                raise SellerNotRegisteredError(sale.seller_id)
            new_sale = self.blockchain.create_sale(
                sale.seller_id, sale.buyer_name, sale.quantity_kg, sale.price
            )
            block_index = self.blockchain.add_sale_to_pending(new_sale)
        return SaleReceipt(sale=sale, block_index=block_index)

    def list_sales(self) -> List[SaleRecord]:
        with self._lock:
            sales = self.blockchain.get_all_sales()
        return [_to_record(i, sale) for i, sale in enumerate(sales)]

    def get_seller(self, seller_id: str) -> Tuple[SellerDetails, List[SaleRecord]]:
        with self._lock:
            wallet = self._sellers.get(seller_id)
            if wallet is None:
                raise SellerNotFoundError(seller_id)
            all_sales = self.blockchain.get_all_sales()

        records = [
            _to_record(i, sale) for i, sale in enumerate(all_sales)
            if sale.seller_id == seller_id
        ]
        details = SellerDetails(
            seller_id=seller_id,
            wallet_address=wallet,
            total_sales=len(records),
            total_quantity=sum(r.quantity_kg for r in records),
            total_revenue=sum(r.price * r.quantity_kg for r in records),
        )
        return details, records

    def sellers_count(self) -> int:
        with self._lock:
            return len(self._sellers)

    def ledger_info(self) -> Dict[str, Any]:
        with self._lock:
            summary = self.blockchain.sales_summary()
            return {
                'totalSales': str(len(self.blockchain.get_all_sales())),
                'totalSellers': str(len(self._sellers)),
                'totalCocoaSold': format_amount(summary['totalCocoa']),
                'chainLength': self.blockchain.length,
                'pendingSales': len(self.blockchain.pending_sales),
                'lastBlockHash': self.blockchain.last_block.hash,
                'currentNodeUrl': self.blockchain.current_node_url,
            }

    def mine(self) -> Dict[str, Any]:
        with self._lock:
            block = self.blockchain.mine()
        return {
            'message': "New block mined successfully",
            'block': block.to_dict(),
        }


def _to_record(position: int, sale: Sale) -> SaleRecord:
    return SaleRecord(
        sale_id=str(position),
        seller_id=sale.seller_id,
        buyer_name=sale.buyer_name,
        quantity_kg=sale.quantity_kg,
        price=sale.price,
        timestamp_ms=sale.timestamp,
    )
