"""
CocoaChain - Main Entry Point
Serves the cocoa sales REST API.
"""

import argparse

from . import config
from .api.app import create_app


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="CocoaChain sales ledger API")
    parser.add_argument("--host", default=config.HOST)
    parser.add_argument("--port", type=int, default=config.PORT)
    parser.add_argument(
        "--backend",
        choices=["contract", "local"],
        default=config.BACKEND,
        help="contract: deployed smart contract, local: in-process toy ledger",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for CocoaChain."""
    args = parse_args(argv)
    app = create_app({'BACKEND': args.backend, 'HOST': args.host, 'PORT': args.port})
    app.run(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
