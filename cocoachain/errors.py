"""
Error Module

Exception hierarchy shared by the ledger, the backends and the REST layer.

Every error carries the HTTP status the API answers with, so request
handlers never have to classify exceptions themselves.
"""

from typing import Any, Dict, Optional


class CocoaChainError(Exception):
    """Base class for all CocoaChain errors."""

    status_code = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        """Response body for this error."""
        body = {'error': self.message}
        body.update(self.extra)
        return body


# ============================================================================
# Client errors (4xx)
# ============================================================================

class ValidationError(CocoaChainError, ValueError):
    """Request or sale data failed validation."""

    status_code = 400


class SellerNotRegisteredError(CocoaChainError):
    """A sale was submitted for a seller id nobody registered."""

    status_code = 400

    def __init__(self, seller_id: str):
        super().__init__(
            f"Seller {seller_id} is not registered. Please register first."
        )
        self.seller_id = seller_id


class SellerNotFoundError(CocoaChainError):
    """Seller lookup on the local ledger found nothing."""

    status_code = 404

    def __init__(self, seller_id: str):
        super().__init__(f"Seller {seller_id} not found")
        self.seller_id = seller_id


# ============================================================================
# Server errors (5xx)
# ============================================================================

class ContractNotInitializedError(CocoaChainError):
    """The smart-contract client never connected."""

    def __init__(self, message: str = "Contract not initialized"):
        super().__init__(message)


class LedgerError(CocoaChainError):
    """The external ledger client reported a failure."""
    pass


class ProofOfWorkError(CocoaChainError):
    """No nonce satisfied the difficulty prefix within the search bound."""
    pass


class ChainValidationError(CocoaChainError):
    """The toy ledger's block linkage or proof-of-work does not check out."""
    pass
