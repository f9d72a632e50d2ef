# CocoaChain
"""
Record keeping for cocoa sales:
- Toy ledger with proof of work - ledger/
- Smart contract and local backends - backends/
- REST API - api/
"""

__version__ = "1.0.0"
