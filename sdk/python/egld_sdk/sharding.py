"""
Address to shard assignment
"""

from typing import Optional

from .address import Address
from .exceptions import (
    InvalidAddressError,
    InvalidNumberOfShardsError,
    InvalidShardIdError,
    NilAddressError,
)

METACHAIN_SHARD_ID = 0xFFFFFFFF
ALL_SHARD_ID = 0xFFFFFFF0

# smart contract addresses start with this many bytes, the last VM_TYPE_LEN
# of them holding the VM type
NUM_INIT_CHARACTERS_FOR_SC_ADDRESS = 10
VM_TYPE_LEN = 2
NUM_INIT_CHARACTERS_FOR_ON_METACHAIN_SC = 15
METACHAIN_SHARD_IDENTIFIER = 0xFF
NUM_INIT_CHARACTERS_FOR_SYSTEM_ACCOUNT_ADDRESS = 30

SYSTEM_ACCOUNT_ADDRESS = b'\xff' * 32


def is_empty_address(address: bytes) -> bool:
    return not any(address)


def is_system_account_address(address: bytes) -> bool:
    """True for the protocol-owned system account"""
    prefix_len = NUM_INIT_CHARACTERS_FOR_SYSTEM_ACCOUNT_ADDRESS
    if len(address) < prefix_len:
        return False
    return address[:prefix_len] == SYSTEM_ACCOUNT_ADDRESS[:prefix_len]


def is_smart_contract_address(address: bytes) -> bool:
    if len(address) <= NUM_INIT_CHARACTERS_FOR_SC_ADDRESS:
        return False
    if is_empty_address(address):
        return True

    num_of_zeros = NUM_INIT_CHARACTERS_FOR_SC_ADDRESS - VM_TYPE_LEN
    return is_empty_address(address[:num_of_zeros])


def is_metachain_identifier(identifier: bytes) -> bool:
    if not identifier:
        return False
    return all(b == METACHAIN_SHARD_IDENTIFIER for b in identifier)


def is_smart_contract_on_metachain(identifier: bytes, address: bytes) -> bool:
    """True for system smart contracts that live on the metachain"""
    if len(address) <= NUM_INIT_CHARACTERS_FOR_SC_ADDRESS + NUM_INIT_CHARACTERS_FOR_ON_METACHAIN_SC:
        return False
    if not is_metachain_identifier(identifier):
        return False
    if not is_smart_contract_address(address):
        return False

    start = NUM_INIT_CHARACTERS_FOR_SC_ADDRESS
    left_side = address[start:start + NUM_INIT_CHARACTERS_FOR_ON_METACHAIN_SC]
    return is_empty_address(left_side)


def shard_id_to_string(shard_id: int) -> str:
    if shard_id == METACHAIN_SHARD_ID:
        return '_META'
    if shard_id == ALL_SHARD_ID:
        return '_ALL'
    return f"_{shard_id}"


def communication_identifier_between_shards(shard_id1: int, shard_id2: int) -> str:
    """
    Identifier of the channel between two shards.

    The smaller shard id always comes first, so the result does not depend
    on argument order.
    """
    if ALL_SHARD_ID in (shard_id1, shard_id2):
        return shard_id_to_string(ALL_SHARD_ID)
    if shard_id1 == shard_id2:
        return shard_id_to_string(shard_id1)

    low, high = sorted((shard_id1, shard_id2))
    return shard_id_to_string(low) + shard_id_to_string(high)


class ShardCoordinator:
    """
    Computes the shard an address belongs to.

    The shard is taken from the trailing bytes of the address, masked with
    enough bits to cover number_of_shards. When the shard count is not a
    power of two, values past the last shard fold back with one bit less.

    Example:
        >>> coordinator = ShardCoordinator(3, 0)
        >>> coordinator.compute_shard_id(Address.from_bech32(alice))
        1
    """

    def __init__(self, number_of_shards: int, self_id: int = 0):
        if number_of_shards < 1:
            raise InvalidNumberOfShardsError(
                f"the number of shards must be greater than zero, provided: {number_of_shards}"
            )
        if self_id >= number_of_shards and self_id != METACHAIN_SHARD_ID:
            raise InvalidShardIdError(
                f"shard id must be smaller than the total number of shards, "
                f"provided: {self_id}, shards: {number_of_shards}"
            )

        self._number_of_shards = number_of_shards
        self._self_id = self_id
        self._mask_high, self._mask_low = self._calculate_masks()
        self._bytes_needed = self._calculate_bytes_needed()

    def _calculate_masks(self):
        # n = ceil(log2(number_of_shards))
        n = (self._number_of_shards - 1).bit_length()
        mask_high = (1 << n) - 1
        mask_low = (1 << (n - 1)) - 1 if n > 0 else 0
        return mask_high, mask_low

    def _calculate_bytes_needed(self) -> int:
        if self._number_of_shards <= 256:
            return 1
        if self._number_of_shards <= 65536:
            return 2
        if self._number_of_shards <= 16777216:
            return 3
        return 4

    @property
    def number_of_shards(self) -> int:
        return self._number_of_shards

    @property
    def self_id(self) -> int:
        return self._self_id

    def compute_id(self, address: bytes) -> int:
        """Shard id of raw address bytes"""
        starting_index = max(len(address) - self._bytes_needed, 0)
        buff_needed = address[starting_index:]
        if is_smart_contract_on_metachain(buff_needed, address):
            return METACHAIN_SHARD_ID

        addr = int.from_bytes(buff_needed, 'big')
        shard = addr & self._mask_high
        if shard > self._number_of_shards - 1:
            shard = addr & self._mask_low
        return shard

    def compute_shard_id(self, address: Optional[Address]) -> int:
        """
        Shard id of an address.

        Raises:
            NilAddressError: address is None
            InvalidAddressError: address holds no bytes
        """
        if address is None:
            raise NilAddressError("nil address")
        raw = address.address_bytes()
        if len(raw) == 0:
            raise InvalidAddressError("empty address")
        return self.compute_id(raw)

    def same_shard(self, first_address: bytes, second_address: bytes) -> bool:
        if first_address == second_address:
            return True
        return self.compute_id(first_address) == self.compute_id(second_address)

    def communication_identifier(self, dest_shard_id: int) -> str:
        return communication_identifier_between_shards(self._self_id, dest_shard_id)
