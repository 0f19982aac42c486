"""
orderguard Crypto Address Module

Ethereum-style 20-byte addresses with EIP-55 checksums.
"""

from eth_utils import to_canonical_address
from eth_utils import to_checksum_address as _to_checksum_address

from ..constants import NULL_ADDRESS, VALID_ADDRESS_PATTERN
from ..exceptions import InvalidAddressError


def is_valid_address(address: str) -> bool:
    """Check for a 0x-prefixed 40 hex char address (checksum not enforced)."""
    return isinstance(address, str) and VALID_ADDRESS_PATTERN.match(address) is not None


def normalize_address(address: str) -> str:
    """
    Lowercase an address for comparison.

    Raises:
        InvalidAddressError: If the address is not 20 bytes of hex
    """
    if not is_valid_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    return address.lower()


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksum format."""
    return _to_checksum_address(normalize_address(address))


def address_to_bytes(address: str) -> bytes:
    """Raw 20-byte form of an address."""
    return to_canonical_address(normalize_address(address))


def addresses_equal(a: str, b: str) -> bool:
    return normalize_address(a) == normalize_address(b)


def is_null_address(address: str) -> bool:
    return normalize_address(address) == NULL_ADDRESS
