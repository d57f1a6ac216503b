"""
Transaction building, signing and broadcasting
"""

import logging
import threading
from typing import List, Optional

from .address import Address
from .client import EgldClient
from .crypto import TransactionSigner
from .models import ArgCreateTransaction, Transaction
from .nonces import NonceCoordinator

logger = logging.getLogger(__name__)


class TransactionInteractor:
    """
    Signs transactions and sends them through an EgldClient.

    Example:
        >>> interactor = TransactionInteractor(client)
        >>> tx_hash = interactor.transfer(secret_key, receiver, "1000000000000000000")
    """

    def __init__(self, proxy: EgldClient, nonce_coordinator: Optional[NonceCoordinator] = None):
        """
        Args:
            proxy: Client used for network reads and broadcasts
            nonce_coordinator: Nonce source (default: one seeded from account nonces)
        """
        self.proxy = proxy
        if nonce_coordinator is None:
            nonce_coordinator = NonceCoordinator(self._fetch_account_nonce)
        self.nonce_coordinator = nonce_coordinator
        self._mut = threading.Lock()
        self._transactions: List[Transaction] = []

    def _fetch_account_nonce(self, bech32_address: str) -> int:
        return self.proxy.get_account(Address.from_bech32(bech32_address)).nonce

    def apply_signature_and_generate_tx(
        self,
        private_key: bytes,
        args: ArgCreateTransaction,
    ) -> Transaction:
        """Build a transaction from args and sign it"""
        transaction = args.to_transaction()
        return TransactionSigner.sign_transaction(transaction, private_key)

    def add_transaction(self, transaction: Transaction):
        """Queue a signed transaction for send_transactions_as_bunch"""
        with self._mut:
            self._transactions.append(transaction)

    def pop_accumulated_transactions(self) -> List[Transaction]:
        with self._mut:
            transactions, self._transactions = self._transactions, []
        return transactions

    def send_transactions_as_bunch(self, bunch_size: int) -> List[str]:
        """
        Send every queued transaction in batches of bunch_size.

        Returns:
            Hashes in queue order
        """
        if bunch_size < 1:
            raise ValueError(f"invalid bunch size: {bunch_size}")

        transactions = self.pop_accumulated_transactions()
        hashes = []
        for start in range(0, len(transactions), bunch_size):
            bunch = transactions[start:start + bunch_size]
            hashes.extend(self.proxy.send_transactions(bunch))
        logger.info("transactions sent: %d", len(hashes))
        return hashes

    def transfer(
        self,
        private_key: bytes,
        receiver: str,
        value: str,
        data: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Sign and broadcast a value transfer.

        A nonce is reserved for the sender. If signing or the broadcast fails
        the reservation is abandoned and the sender's next transfer re-syncs
        from the network, never going back below nonces already used.

        Args:
            private_key: Sender's private key
            receiver: Receiver address (bech32)
            value: Amount in the smallest unit
            data: Optional data payload
            timeout: Deadline of each request, in seconds

        Returns:
            Transaction hash
        """
        sender = Address.from_private_key(private_key)
        network_configs = self.proxy.get_network_config(timeout)
        args = self.proxy.get_default_transaction_arguments(sender, network_configs)
        args.rcv_addr = receiver
        args.value = value
        args.data = data
        if data:
            args.gas_limit += len(data) * network_configs.gas_per_data_byte

        nonce = self.nonce_coordinator.reserve(args.snd_addr)
        args.nonce = nonce
        try:
            transaction = self.apply_signature_and_generate_tx(private_key, args)
            tx_hash = self.proxy.send_transaction(transaction, timeout)
        except Exception:
            logger.warning("broadcast from %s with nonce %d failed, nonce will be re-synced",
                           args.snd_addr, nonce)
            self.nonce_coordinator.abandon(args.snd_addr, nonce)
            raise

        self.nonce_coordinator.confirm(args.snd_addr, nonce)
        logger.info("transaction sent: %s", tx_hash)
        return tx_hash

    def get_balance(self, bech32_address: str) -> str:
        """Balance of an account, in the smallest unit"""
        return self.proxy.get_account(Address.from_bech32(bech32_address)).balance
