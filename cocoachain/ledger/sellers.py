"""
Seller id derivation.

The CocoaChain contract names each seller after its wallet address:
"SEL" followed by one hex digit per address byte (byte mod 16) for the
first 7 bytes. This module reproduces that so the API can report the id
without another contract round-trip.
"""

import re

from ..errors import ValidationError

SELLER_ID_PREFIX = "SEL"
SELLER_ID_BYTES = 7
HEX_CHARS = "0123456789abcdef"

_ADDRESS_RE = re.compile(r'^(0x)?[0-9a-fA-F]{40}$')


def is_wallet_address(address: str) -> bool:
    """True for a 20-byte hex address, with or without 0x."""
    return isinstance(address, str) and bool(_ADDRESS_RE.match(address))


def generate_seller_id(wallet_address: str) -> str:
    """
    Derive the seller id for a wallet address.

    Args:
        wallet_address: Hex address, e.g. "0xf39F...2266" (case-insensitive)

    Returns:
        10 character id such as "SEL3f9a7b2"

    Raises:
        ValidationError: If the address is not a 20-byte hex string
    """
    if not is_wallet_address(wallet_address):
        raise ValidationError(f"Invalid wallet address: {wallet_address!r}")

    addr = wallet_address[2:] if wallet_address.startswith('0x') else wallet_address

    result = SELLER_ID_PREFIX
    for i in range(SELLER_ID_BYTES):
        byte_val = int(addr[i * 2:i * 2 + 2], 16)
        result += HEX_CHARS[byte_val % 16]
    return result
