"""
Transaction signing for EGLD
"""

import json

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .address import Address, seed_of
from .exceptions import InvalidAddressError
from .models import Transaction


class TransactionSigner:
    """
    Signs transactions with Ed25519 via PyNaCl.

    The signed message is the transaction's compact JSON with the signature
    cleared, in the same key order used on the wire.
    """

    @staticmethod
    def signing_payload(transaction: Transaction) -> bytes:
        """
        Bytes that get signed for a transaction.

        Args:
            transaction: Transaction (its signature is ignored)

        Returns:
            Canonical JSON bytes
        """
        fields = transaction.to_dict()
        fields.pop('signature', None)
        return json.dumps(fields, separators=(',', ':')).encode('utf-8')

    @staticmethod
    def sign_transaction(transaction: Transaction, private_key: bytes) -> Transaction:
        """
        Sign a transaction in place.

        Only the signature field is changed.

        Args:
            transaction: Transaction to sign
            private_key: Sender's 32-byte seed (or 64-byte seed + public key)

        Returns:
            The same Transaction object, signed

        Example:
            >>> tx = Transaction(nonce=1, value="1000", receiver=bob, sender=alice,
            ...                  gas_price=1000000000, gas_limit=50000,
            ...                  chain_id="T", version=1)
            >>> TransactionSigner.sign_transaction(tx, secret_key)
            >>> client.send_transaction(tx)
        """
        transaction.signature = ''
        message = TransactionSigner.signing_payload(transaction)

        signing_key = SigningKey(seed_of(private_key))
        signed = signing_key.sign(message)
        transaction.signature = signed.signature.hex()
        return transaction

    @staticmethod
    def verify_transaction(transaction: Transaction) -> bool:
        """
        Verify a transaction signature against its sender.

        Args:
            transaction: Transaction object with signature

        Returns:
            True if signature is valid, False otherwise
        """
        try:
            sender = Address.from_bech32(transaction.sender)
            signature = bytes.fromhex(transaction.signature)
        except (InvalidAddressError, ValueError):
            return False
        if not sender.is_valid() or not signature:
            return False

        message = TransactionSigner.signing_payload(transaction)
        try:
            VerifyKey(sender.address_bytes()).verify(message, signature)
        except (BadSignatureError, ValueError):
            return False
        return True
