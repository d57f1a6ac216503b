"""
Account address container
"""

from typing import Union

import bech32
from nacl.signing import SigningKey

from .exceptions import InvalidAddressError, InvalidPrivateKeyError

ADDRESS_BYTES_LEN = 32
ADDRESS_HRP = 'erd'


class Address:
    """
    Raw bytes of an account identifier.

    Example:
        >>> addr = Address.from_bech32("erd1qyu5wthldzr8wx5c9ucg8kjagg0jfs53s8nr3zpz3hypefsdd8ssycr6th")
        >>> addr.is_valid()
        True
    """

    __slots__ = ('_bytes',)

    def __init__(self, raw: Union[bytes, bytearray]):
        self._bytes = bytes(raw)

    @classmethod
    def from_bech32(cls, value: str) -> 'Address':
        """
        Decode a human-readable (bech32) address.

        Args:
            value: Address such as "erd1..."

        Returns:
            Address object

        Raises:
            InvalidAddressError: if the string is not a valid bech32 address
                with the expected prefix
        """
        hrp, data = bech32.bech32_decode(value)
        if hrp != ADDRESS_HRP or data is None:
            raise InvalidAddressError(f"invalid bech32 address: {value!r}")
        decoded = bech32.convertbits(data, 5, 8, False)
        if decoded is None:
            raise InvalidAddressError(f"invalid bech32 payload: {value!r}")
        return cls(bytes(decoded))

    @classmethod
    def from_private_key(cls, private_key: bytes) -> 'Address':
        """
        Derive the address (Ed25519 public key) of a private key.

        Accepts a 32-byte seed or a 64-byte seed + public key.
        """
        signing_key = SigningKey(seed_of(private_key))
        return cls(bytes(signing_key.verify_key))

    def address_bytes(self) -> bytes:
        return self._bytes

    def is_valid(self) -> bool:
        return len(self._bytes) == ADDRESS_BYTES_LEN

    def to_bech32(self) -> str:
        data = bech32.convertbits(self._bytes, 8, 5, True)
        return bech32.bech32_encode(ADDRESS_HRP, data)

    def hex(self) -> str:
        return self._bytes.hex()

    def __eq__(self, other):
        if not isinstance(other, Address):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self):
        return hash(self._bytes)

    def __repr__(self):
        return f"Address({self._bytes.hex()})"


def seed_of(private_key: bytes) -> bytes:
    """Return the 32-byte Ed25519 seed of a private key"""
    if len(private_key) == 64:
        return bytes(private_key[:32])
    if len(private_key) != 32:
        raise InvalidPrivateKeyError(
            f"private key must be 32 or 64 bytes, got {len(private_key)}"
        )
    return bytes(private_key)
