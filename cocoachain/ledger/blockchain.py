"""
Toy Ledger Module

In-process ledger for cocoa sales:
- Sales collect in a pending pool
- Mining batches the pool into a block
- Blocks are linked through previous-block hashes
- A trivial Proof of Work (hash must start with "00") guards each block

Nothing here is persisted; all state lives for the life of the process.
"""

import hashlib
import json
import time
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, List, Optional, Tuple

from .. import config
from ..errors import ChainValidationError, ProofOfWorkError, ValidationError
from ..log import get_logger

logger = get_logger("ledger")


# ============================================================================
# Constants
# ============================================================================

GENESIS_NONCE = 100
GENESIS_PREV_HASH = '0'
GENESIS_HASH = '0'
DEFAULT_PREFIX = '00'  # Required hex prefix of a mined block hash
MAX_NONCE = 2 ** 32  # Search bound for proof of work


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


# ============================================================================
# Sale and Block (Immutable)
# ============================================================================

@dataclass(frozen=True)
class Sale:
    """A single cocoa sale waiting in, or recorded on, the ledger."""
    seller_id: str
    buyer_name: str
    quantity_kg: float
    price: float
    timestamp: int  # epoch milliseconds

    @property
    def revenue(self) -> float:
        """Price per kg times quantity."""
        return self.price * self.quantity_kg

    def to_dict(self) -> Dict[str, Any]:
        """Wire form, also what gets hashed into a block."""
        return {
            'sellerId': self.seller_id,
            'buyerName': self.buyer_name,
            'quantityKg': self.quantity_kg,
            'price': self.price,
            'timestamp': self.timestamp,
        }


@dataclass(frozen=True)
class Block:
    """
    Immutable block of sales.

    `previous_block_hash` is expected to equal the hash of the block
    before it; `Blockchain.validate_chain` checks that.
    """
    index: int
    timestamp: int
    sales: Tuple[Sale, ...]
    nonce: int
    hash: str
    previous_block_hash: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert block to dictionary for serialization."""
        return {
            'index': self.index,
            'timestamp': self.timestamp,
            'sales': [sale.to_dict() for sale in self.sales],
            'nonce': self.nonce,
            'hash': self.hash,
            'previousBlockHash': self.previous_block_hash,
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _plain(value: Any) -> Any:
    """
    Reduce block data to dicts, lists and JSON scalars.

    Whole-number floats become ints, so 100.0 is written as 100 like
    JSON.stringify does (up to 1e21, where it switches to exponents).
    """
    if hasattr(value, 'to_dict'):
        return _plain(value.to_dict())
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    return value


def block_data_json(block_data: Any) -> str:
    """Compact JSON, byte-for-byte what JSON.stringify would emit for plain data."""
    return json.dumps(_plain(block_data), separators=(',', ':'), ensure_ascii=False)


# ============================================================================
# Blockchain
# ============================================================================

class Blockchain:
    """
    Minimal cocoa sales ledger.

    Sales are added to a pending pool and batched into a block when
    `mine()` (or `create_new_block`) is called. Blocks are never
    changed after creation.
    """

    def __init__(
        self,
        current_node_url: Optional[str] = None,
        difficulty_prefix: str = DEFAULT_PREFIX
    ):
        """
        Initialize a new ledger with its genesis block.

        Args:
            current_node_url: URL this node is reachable at
            difficulty_prefix: Hex prefix a mined block hash must start with
        """
        self._chain: List[Block] = []
        self._pending_sales: List[Sale] = []
        self.current_node_url = current_node_url or config.NODE_URL
        self.network_nodes: List[str] = []
        self.difficulty_prefix = difficulty_prefix

        # Genesis block
        self.create_new_block(GENESIS_NONCE, GENESIS_PREV_HASH, GENESIS_HASH)

    @property
    def chain(self) -> List[Block]:
        """Copy of the chain."""
        return list(self._chain)

    @property
    def pending_sales(self) -> List[Sale]:
        """Copy of the pending pool."""
        return list(self._pending_sales)

    @property
    def length(self) -> int:
        return len(self._chain)

    @property
    def last_block(self) -> Block:
        return self._chain[-1]

    def get_last_block(self) -> Block:
        """Get the last block in the chain."""
        return self._chain[-1]

    # ------------------------------------------------------------------------
    # Blocks and sales
    # ------------------------------------------------------------------------

    def create_new_block(self, nonce: int, previous_block_hash: str, hash: str) -> Block:
        """
        Append a block holding every pending sale and clear the pool.

        Args:
            nonce: Nonce found by proof of work
            previous_block_hash: Hash of the current last block
            hash: Hash of the new block

        Returns:
            The new block
        """
        block = Block(
            index=len(self._chain),
            timestamp=now_ms(),
            sales=tuple(self._pending_sales),
            nonce=nonce,
            hash=hash,
            previous_block_hash=previous_block_hash,
        )
        self._pending_sales = []
        self._chain.append(block)
        return block

    def create_sale(
        self,
        seller_id: str,
        buyer_name: str,
        quantity_kg: float,
        price: float
    ) -> Sale:
        """
        Build a sale stamped with the current time.

        A seller may have any number of sales.

        Raises:
            ValidationError: Missing seller/buyer or non-positive quantity/price
        """
        if not seller_id or not buyer_name:
            raise ValidationError("sellerId and buyerName are required")
        if not _is_number(quantity_kg) or quantity_kg <= 0:
            raise ValidationError("quantityKg must be a positive number")
        if not _is_number(price) or price <= 0:
            raise ValidationError("price must be a positive number")

        return Sale(
            seller_id=seller_id,
            buyer_name=buyer_name,
            quantity_kg=quantity_kg,
            price=price,
            timestamp=now_ms(),
        )

    def add_sale_to_pending(self, sale: Sale) -> int:
        """
        Queue a sale for the next block.

        Returns:
            Index of the block the sale will be mined into
        """
        if sale is None:
            raise ValidationError("Sale cannot be empty")
        self._pending_sales.append(sale)
        return self.get_last_block().index + 1

    # ------------------------------------------------------------------------
    # Proof of Work
    # ------------------------------------------------------------------------

    def hash_block(self, previous_hash: str, block_data: Any, nonce: int) -> str:
        """SHA-256 hex of previous hash + nonce + compact JSON of the block data."""
        payload = previous_hash + str(nonce) + block_data_json(block_data)
        return hashlib.sha256(payload.encode('utf-8')).hexdigest()

    def proof_of_work(
        self,
        previous_hash: str,
        block_data: Any,
        max_nonce: int = MAX_NONCE
    ) -> int:
        """
        Find the smallest nonce whose block hash starts with the difficulty prefix.

        Linear scan from zero. With a two hex digit prefix this takes
        a few hundred attempts.

        Raises:
            ProofOfWorkError: If no nonce below max_nonce qualifies
        """
        for nonce in range(max_nonce):
            block_hash = self.hash_block(previous_hash, block_data, nonce)
            if block_hash.startswith(self.difficulty_prefix):
                return nonce

        raise ProofOfWorkError(
            f"Failed to find valid nonce after {max_nonce} attempts"
        )

    def mine(self) -> Block:
        """
        Mine the pending pool into a new block.

        Raises:
            ValidationError: If there is nothing to mine
        """
        if not self._pending_sales:
            raise ValidationError("No pending sales to mine")

        last_block = self.get_last_block()
        block_data = self._block_data(self._pending_sales, last_block.index + 1)
        nonce = self.proof_of_work(last_block.hash, block_data)
        block_hash = self.hash_block(last_block.hash, block_data, nonce)

        block = self.create_new_block(nonce, last_block.hash, block_hash)
        logger.info("Mined block #%d with %d sale(s), nonce=%d",
                    block.index, len(block.sales), nonce)
        return block

    @staticmethod
    def _block_data(sales, index: int) -> Dict[str, Any]:
        return {
            'sales': [sale.to_dict() for sale in sales],
            'index': index,
        }

    def validate_chain(self) -> bool:
        """
        Validate index sequence, hash linkage and proof of work.

        Returns:
            True if chain is valid

        Raises:
            ChainValidationError: On the first bad block
        """
        genesis = self._chain[0]
        if (genesis.index != 0 or genesis.nonce != GENESIS_NONCE
                or genesis.previous_block_hash != GENESIS_PREV_HASH
                or genesis.hash != GENESIS_HASH):
            raise ChainValidationError("Invalid genesis block")

        for prev_block, block in zip(self._chain, self._chain[1:]):
            if block.index != prev_block.index + 1:
                raise ChainValidationError(
                    f"Invalid index: expected {prev_block.index + 1}, got {block.index}"
                )
            if block.previous_block_hash != prev_block.hash:
                raise ChainValidationError(
                    f"Previous hash mismatch at block #{block.index}"
                )
            block_data = self._block_data(block.sales, block.index)
            computed = self.hash_block(prev_block.hash, block_data, block.nonce)
            if computed != block.hash:
                raise ChainValidationError(f"Block hash mismatch at block #{block.index}")
            if not block.hash.startswith(self.difficulty_prefix):
                raise ChainValidationError(
                    f"Block #{block.index} does not meet difficulty prefix"
                )

        return True

    # ------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------

    def get_all_sales(self) -> List[Sale]:
        """All mined sales, in chain order."""
        return [sale for block in self._chain for sale in block.sales]

    def get_seller_sales(self, seller_id: str) -> List[Sale]:
        """Mined sales of one seller, in chain order."""
        return [sale for sale in self.get_all_sales() if sale.seller_id == seller_id]

    def sales_summary(self) -> Dict[str, Any]:
        """
        Totals per seller and across the ledger.

        Only mined sales are counted.
        """
        summary: Dict[str, Dict[str, float]] = {}
        total_cocoa = 0
        total_revenue = 0

        for sale in self.get_all_sales():
            stats = summary.setdefault(
                sale.seller_id, {'sales': 0, 'quantity': 0, 'revenue': 0}
            )
            stats['sales'] += 1
            stats['quantity'] += sale.quantity_kg
            stats['revenue'] += sale.revenue
            total_cocoa += sale.quantity_kg
            total_revenue += sale.revenue

        return {
            'summaryPerSeller': summary,
            'totalCocoa': total_cocoa,
            'totalRevenue': total_revenue,
            'averagePricePerKg': average_price_per_kg(total_revenue, total_cocoa),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'chain': [block.to_dict() for block in self._chain],
            'pendingSales': [sale.to_dict() for sale in self._pending_sales],
            'currentNodeUrl': self.current_node_url,
            'networkNodes': list(self.network_nodes),
        }


def average_price_per_kg(total_revenue: float, total_cocoa: float):
    """Revenue / quantity as a two-decimal string, or 0 when nothing was sold."""
    if total_cocoa > 0:
        return f"{total_revenue / total_cocoa:.2f}"
    return 0
