"""
Transaction signing tests
"""
import json

from egld_sdk.crypto import TransactionSigner
from egld_sdk.models import Transaction
from tests.fakes import ALICE, ALICE_SECRET, BOB


def _transaction(**overrides):
    values = dict(
        nonce=7,
        value="1000000000000000000",
        receiver=BOB,
        sender=ALICE,
        gas_price=1000000000,
        gas_limit=50000,
        chain_id="T",
        version=1,
    )
    values.update(overrides)
    return Transaction(**values)


def test_signing_payload_skips_signature():
    tx = _transaction(signature="ab" * 64)
    payload = json.loads(TransactionSigner.signing_payload(tx))
    assert "signature" not in payload
    assert list(payload) == ["nonce", "value", "receiver", "sender", "gasPrice", "gasLimit", "chainID", "version"]


def test_signing_payload_is_compact_json():
    payload = TransactionSigner.signing_payload(_transaction(data=b"hello"))
    assert b" " not in payload
    assert json.loads(payload)["data"] == "aGVsbG8="


def test_sign_then_verify():
    tx = TransactionSigner.sign_transaction(_transaction(), ALICE_SECRET)
    assert len(tx.signature) == 128
    assert TransactionSigner.verify_transaction(tx)


def test_signing_only_changes_signature():
    tx = _transaction(data=b"memo")
    before = tx.to_dict()
    TransactionSigner.sign_transaction(tx, ALICE_SECRET)
    after = tx.to_dict()
    signature = after.pop("signature")
    assert after == before
    assert signature == tx.signature


def test_signing_is_deterministic_and_ignores_previous_signature():
    first = TransactionSigner.sign_transaction(_transaction(), ALICE_SECRET).signature
    second = TransactionSigner.sign_transaction(_transaction(signature="00" * 64), ALICE_SECRET).signature
    assert first == second


def test_tampered_transaction_fails_verification():
    tx = TransactionSigner.sign_transaction(_transaction(), ALICE_SECRET)
    tx.value = "2000000000000000000"
    assert not TransactionSigner.verify_transaction(tx)


def test_signature_from_other_sender_fails_verification():
    tx = TransactionSigner.sign_transaction(_transaction(), ALICE_SECRET)
    tx.sender = BOB
    assert not TransactionSigner.verify_transaction(tx)


def test_malformed_signature_fails_verification():
    assert not TransactionSigner.verify_transaction(_transaction(signature=""))
    assert not TransactionSigner.verify_transaction(_transaction(signature="zz"))
    assert not TransactionSigner.verify_transaction(_transaction(signature="ab" * 10))
    assert not TransactionSigner.verify_transaction(_transaction(sender="erd1invalid", signature="ab" * 64))
