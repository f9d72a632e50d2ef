"""
Smart Contract Backend

Delegates all state to the deployed CocoaChain contract through web3.py:
- Reads go through `contract.functions.<name>(...).call()`
- Writes are sent from the node's first account and wait for a receipt

Registration rules, uniqueness and seller totals are enforced by the
contract. This module only shapes arguments and results.
"""

import json
from numbers import Real
from typing import Any, Dict, List, Optional, Tuple

from web3 import Web3
from web3.exceptions import Web3Exception

from .. import config
from ..errors import (
    ContractNotInitializedError,
    LedgerError,
    SellerNotRegisteredError,
    ValidationError,
)
from ..ledger.sellers import generate_seller_id
from ..log import get_logger
from .base import (
    Registration,
    SaleReceipt,
    SaleRecord,
    SaleRequest,
    SalesLedger,
    SellerDetails,
)

logger = get_logger("contract")

# Failures the web3 client can raise for a call or transaction
CLIENT_ERRORS = (Web3Exception, OSError, ValueError)

MINE_NOTE = {
    'message': "Mining is automatic on-chain with smart contract.",
    'note': "Ethereum uses Proof of Stake, not Proof of Work for block validation",
}


def load_abi(path: str) -> List[Dict[str, Any]]:
    """
    Load the contract ABI from a bare ABI list or a compiler artifact.

    Hardhat artifacts wrap the ABI as {"abi": [...], "bytecode": ...}.
    """
    with open(path, 'r', encoding='utf-8') as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        return data['abi']
    return data


def to_uint(value: Real, field: str) -> int:
    """Coerce a validated positive amount to a uint256 argument."""
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field} must be a whole number to be recorded on-chain")
    return int(value)


def sale_from_struct(raw) -> SaleRecord:
    """Decode a Sale struct: (saleId, sellerId, buyerName, quantityKg, price, timestamp)."""
    sale_id, seller_id, buyer_name, quantity_kg, price, timestamp = raw[:6]
    return SaleRecord(
        sale_id=str(sale_id),
        seller_id=seller_id,
        buyer_name=buyer_name,
        quantity_kg=quantity_kg,
        price=price,
        timestamp_ms=int(timestamp) * 1000,
    )


class ContractLedger(SalesLedger):
    """
    `SalesLedger` backed by the CocoaChain smart contract.

    If the client cannot be set up the failure is logged and the backend
    stays uninitialized: every call then raises
    `ContractNotInitializedError`, the way the service behaves before the
    contract is deployed.
    """

    name = "contract"

    def __init__(
        self,
        rpc_url: str = config.RPC_URL,
        contract_address: str = config.CONTRACT_ADDRESS,
        abi_path: str = config.ABI_PATH,
        web3: Optional[Web3] = None,
        contract=None,
        signer: Optional[str] = None
    ):
        """
        Args:
            rpc_url: JSON-RPC endpoint of the Ethereum node
            contract_address: Deployed CocoaChain address
            abi_path: ABI or artifact JSON file
            web3: Pre-built client (skips provider setup)
            contract: Pre-built contract object (skips ABI loading)
            signer: Account to send transactions from (defaults to accounts[0])
        """
        self.rpc_url = rpc_url
        self.contract_address = contract_address
        self.abi_path = abi_path
        self.w3 = web3
        self.contract = contract
        self.signer = signer

        if self.contract is None or self.signer is None:
            self.initialize()

    def initialize(self) -> bool:
        """Connect to the node, bind the contract and pick the signer."""
        try:
            if self.w3 is None:
                self.w3 = Web3(Web3.HTTPProvider(self.rpc_url))
            if self.contract is None:
                self.contract = self.w3.eth.contract(
                    address=Web3.to_checksum_address(self.contract_address),
                    abi=load_abi(self.abi_path),
                )
            if self.signer is None:
                self.signer = self.w3.eth.accounts[0]
        except (*CLIENT_ERRORS, IndexError, KeyError) as exc:
            self.contract = None
            self.signer = None
            logger.error("Contract initialization failed: %s", exc)
            logger.warning("Please ensure the contract is deployed and the address is correct")
            return False

        logger.info("Contract initialized at: %s", self.contract_address)
        return True

    @property
    def initialized(self) -> bool:
        return self.contract is not None and self.signer is not None

    # ------------------------------------------------------------------------
    # Client plumbing
    # ------------------------------------------------------------------------

    def _functions(self):
        if not self.initialized:
            raise ContractNotInitializedError()
        return self.contract.functions

    def _call(self, name: str, *args):
        """Run a view function."""
        functions = self._functions()
        try:
            return getattr(functions, name)(*args).call()
        except CLIENT_ERRORS as exc:
            raise LedgerError(str(exc)) from exc

    def _transact(self, name: str, *args) -> str:
        """Send a transaction, wait for it to be mined, return its hash."""
        functions = self._functions()
        try:
            tx_hash = getattr(functions, name)(*args).transact({'from': self.signer})
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except CLIENT_ERRORS as exc:
            raise LedgerError(str(exc)) from exc

        tx_hex = Web3.to_hex(receipt['transactionHash'])
        if receipt.get('status') == 0:
            raise LedgerError(f"Transaction {tx_hex} reverted")
        return tx_hex

    # ------------------------------------------------------------------------
    # SalesLedger
    # ------------------------------------------------------------------------

    def register_seller(self) -> Registration:
        tx_hash = self._transact('registerSeller')
        wallet = self.signer
        seller_id = generate_seller_id(wallet)
        logger.info("Registered seller %s (tx %s)", seller_id, tx_hash)
        return Registration(seller_id=seller_id, wallet_address=wallet, transaction_hash=tx_hash)

    def is_seller_registered(self, seller_id: str) -> bool:
        return bool(self._call('isSellerRegistered', seller_id))

    def record_sale(self, sale: SaleRequest) -> SaleReceipt:
        if not self.is_seller_registered(sale.seller_id):
            raise SellerNotRegisteredError(sale.seller_id)

        quantity = to_uint(sale.quantity_kg, 'quantityKg')
        price = to_uint(sale.price, 'price')

        tx_hash = self._transact(
            'recordSaleMultiple', sale.seller_id, sale.buyer_name, quantity, price
        )
        return SaleReceipt(sale=sale, transaction_hash=tx_hash)

    def list_sales(self) -> List[SaleRecord]:
        count = self._call('getSalesCount')
        return [sale_from_struct(self._call('getSale', i)) for i in range(count)]

    def get_seller(self, seller_id: str) -> Tuple[SellerDetails, List[SaleRecord]]:
        raw = self._call('getSellerDetails', seller_id)
        sales = self._call('getSellerSales', seller_id)
        details = SellerDetails(
            seller_id=raw[0],
            wallet_address=raw[1],
            total_sales=raw[2],
            total_quantity=raw[3],
            total_revenue=raw[4],
        )
        return details, [sale_from_struct(s) for s in sales]

    def sellers_count(self) -> int:
        return int(self._call('getSellersCount'))

    def ledger_info(self) -> Dict[str, Any]:
        return {
            'totalSales': str(self._call('getSalesCount')),
            'totalSellers': str(self._call('getSellersCount')),
            'totalCocoaSold': str(self._call('totalCocoaSold')),
            'contractAddress': self.contract_address,
        }

    def mine(self) -> Dict[str, Any]:
        return dict(MINE_NOTE)
