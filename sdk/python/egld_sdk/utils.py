"""
Utility functions for EGLD
"""

import re
from decimal import Decimal

from .sharding import METACHAIN_SHARD_ID

_BECH32_ADDRESS = re.compile(r'^erd1[qpzry9x8gf2tvdw0s3jn54khce6mua7l]{58}$')


class Utils:
    """Helper utilities for EGLD operations"""

    @staticmethod
    def to_smallest_unit(amount, decimals: int = 18) -> int:
        """
        Convert a denominated amount to the network's smallest unit.

        Args:
            amount: Amount in EGLD (str, int or Decimal)
            decimals: Denomination (default: 18)

        Returns:
            Amount in the smallest unit

        Example:
            >>> Utils.to_smallest_unit("1.5")
            1500000000000000000
        """
        return int(Decimal(str(amount)).scaleb(decimals))

    @staticmethod
    def from_smallest_unit(value: int, decimals: int = 18) -> Decimal:
        """
        Convert from the smallest unit to a denominated amount.

        Args:
            value: Amount in the smallest unit
            decimals: Denomination (default: 18)

        Returns:
            Denominated amount
        """
        return Decimal(value).scaleb(-decimals)

    @staticmethod
    def is_valid_address(address: str) -> bool:
        """
        Validate the shape of a bech32 address (checksum not verified).

        Args:
            address: Address string

        Returns:
            True if valid, False otherwise
        """
        return bool(_BECH32_ADDRESS.match(address))

    @staticmethod
    def format_address(address: str, length: int = 16) -> str:
        """
        Format address for display (shortened).

        Args:
            address: Full address
            length: Number of characters to show from start

        Returns:
            Shortened address with ellipsis
        """
        if len(address) <= length:
            return address
        return f"{address[:length]}..."

    @staticmethod
    def convert_bytes(size: int) -> str:
        """
        Human readable byte count using KB, MB and GB multipliers.

        Example:
            >>> Utils.convert_bytes(2048)
            '2.00 KB'
        """
        if size < 1024:
            return f"{size} B"
        if size < 1024 * 1024:
            return f"{size / 1024:.2f} KB"
        if size < 1024 * 1024 * 1024:
            return f"{size / 1024 / 1024:.2f} MB"
        return f"{size / 1024 / 1024 / 1024:.2f} GB"

    @staticmethod
    def seconds_to_readable(seconds: int) -> str:
        """
        Convert seconds to human-readable format.

        Args:
            seconds: Number of seconds

        Returns:
            Readable string (e.g., "1 hour 2 minutes 5 seconds")
        """
        hours, rest = divmod(seconds, 3600)
        minutes, secs = divmod(rest, 60)

        parts = []
        for count, unit in ((hours, 'hour'), (minutes, 'minute'), (secs, 'second')):
            if count > 0:
                parts.append(f"{count} {unit}" + ('s' if count > 1 else ''))
        return ' '.join(parts)

    @staticmethod
    def get_shard_id_string(shard_id: int) -> str:
        """Shard id for display, 'metachain' for the metachain"""
        if shard_id == METACHAIN_SHARD_ID:
            return 'metachain'
        return str(shard_id)

    @staticmethod
    def convert_shard_id(shard_id: str) -> int:
        """
        Inverse of get_shard_id_string.

        Raises:
            ValueError: shard_id is neither 'metachain' nor a number
        """
        if shard_id == 'metachain':
            return METACHAIN_SHARD_ID
        return int(shard_id, 10) & 0xFFFFFFFF

    @staticmethod
    def epoch_start_identifier(epoch: int) -> str:
        return f"epochStartBlock_{epoch}"
