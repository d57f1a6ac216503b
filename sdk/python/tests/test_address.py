"""
Address encoding tests
"""
import pytest

from egld_sdk.address import Address, seed_of
from egld_sdk.exceptions import InvalidAddressError, InvalidPrivateKeyError
from tests.fakes import ALICE, ALICE_PUBKEY, ALICE_SECRET, BOB


def test_bech32_decodes_to_public_key():
    address = Address.from_bech32(ALICE)
    assert address.address_bytes() == ALICE_PUBKEY
    assert address.is_valid()
    assert address.hex() == ALICE_PUBKEY.hex()


def test_bech32_encoding_matches_known_address():
    assert Address(ALICE_PUBKEY).to_bech32() == ALICE


def test_address_from_private_key():
    assert Address.from_private_key(ALICE_SECRET).to_bech32() == ALICE
    # seed + public key form
    assert Address.from_private_key(ALICE_SECRET + ALICE_PUBKEY).to_bech32() == ALICE


def test_addresses_compare_by_bytes():
    assert Address.from_bech32(ALICE) == Address(ALICE_PUBKEY)
    assert Address.from_bech32(ALICE) != Address.from_bech32(BOB)
    assert len({Address.from_bech32(ALICE), Address(ALICE_PUBKEY)}) == 1


@pytest.mark.parametrize("value", [
    "",
    "not an address",
    # wrong checksum
    ALICE[:-1] + ("q" if ALICE[-1] != "q" else "p"),
    # wrong prefix
    "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4",
])
def test_invalid_bech32_is_rejected(value):
    with pytest.raises(InvalidAddressError):
        Address.from_bech32(value)


def test_short_address_is_not_valid():
    assert not Address(b"\x01" * 20).is_valid()
    assert not Address(b"").is_valid()


def test_seed_of_rejects_wrong_lengths():
    assert seed_of(ALICE_SECRET) == ALICE_SECRET
    assert seed_of(ALICE_SECRET + ALICE_PUBKEY) == ALICE_SECRET
    with pytest.raises(InvalidPrivateKeyError):
        seed_of(b"\x00" * 16)
