# CocoaChain Test Suite
"""
Test suite including:
- Toy ledger unit tests
- REST API tests (local backend)
- Smart contract backend tests (fake contract)

Run with: pytest
"""
