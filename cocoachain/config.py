"""
Configuration

Environment-driven settings. `create_app` copies these into `app.config`,
where tests may override any of them.
"""

import os

# Backend selection: "contract" (external smart contract) or "local" (toy ledger)
BACKEND: str = os.getenv("COCOACHAIN_BACKEND", "contract")

# Ethereum JSON-RPC endpoint and deployed CocoaChain contract
RPC_URL: str = os.getenv("COCOACHAIN_RPC_URL", "http://127.0.0.1:8545")
CONTRACT_ADDRESS: str = os.getenv(
    "CONTRACT_ADDRESS", "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
)
ABI_PATH: str = os.getenv(
    "COCOACHAIN_ABI_PATH",
    os.path.join(os.path.dirname(__file__), "backends", "CocoaChain.abi.json"),
)

# HTTP server
HOST: str = os.getenv("COCOACHAIN_HOST", "0.0.0.0")
PORT: int = int(os.getenv("COCOACHAIN_PORT", 3001))
NODE_URL: str = os.getenv("COCOACHAIN_NODE_URL", "http://localhost:3001")

# Wallet the local backend registers sellers under (generated when unset)
WALLET_ADDRESS = os.getenv("COCOACHAIN_WALLET_ADDRESS") or None

LOG_LEVEL: str = os.getenv("COCOACHAIN_LOG_LEVEL", "INFO")

# Response shaping
RECENT_SALES_LIMIT = 5
TOP_SELLERS_LIMIT = 5


def as_dict() -> dict:
    """Settings in the key layout used by `app.config`."""
    return {
        'BACKEND': BACKEND,
        'RPC_URL': RPC_URL,
        'CONTRACT_ADDRESS': CONTRACT_ADDRESS,
        'ABI_PATH': ABI_PATH,
        'HOST': HOST,
        'PORT': PORT,
        'NODE_URL': NODE_URL,
        'WALLET_ADDRESS': WALLET_ADDRESS,
        'LOG_LEVEL': LOG_LEVEL,
    }
