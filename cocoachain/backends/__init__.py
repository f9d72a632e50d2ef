# Backends Module
"""
Storage backends behind the REST service:
- ContractLedger: deployed CocoaChain smart contract (web3.py)
- LocalLedger: in-process toy ledger with proof of work
"""

from typing import Any, Mapping

from .base import (
    SalesLedger,
    SaleRequest,
    SaleRecord,
    SellerDetails,
    Registration,
    SaleReceipt,
    format_amount,
    iso_timestamp,
)


def create_ledger(settings: Mapping[str, Any]) -> SalesLedger:
    """Build the backend named by settings['BACKEND']."""
    backend = settings.get('BACKEND', 'contract')

    if backend == 'local':
        from ..ledger.blockchain import Blockchain
        from .local import LocalLedger
        return LocalLedger(
            blockchain=Blockchain(settings.get('NODE_URL')),
            wallet_address=settings.get('WALLET_ADDRESS'),
        )

    if backend == 'contract':
        from .contract import ContractLedger
        return ContractLedger(
            rpc_url=settings['RPC_URL'],
            contract_address=settings['CONTRACT_ADDRESS'],
            abi_path=settings['ABI_PATH'],
        )

    raise ValueError(f"Unknown backend: {backend!r} (expected 'contract' or 'local')")


__all__ = [
    'SalesLedger',
    'SaleRequest',
    'SaleRecord',
    'SellerDetails',
    'Registration',
    'SaleReceipt',
    'format_amount',
    'iso_timestamp',
    'create_ledger',
]
