"""
Main EGLD proxy client
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from .address import Address
from .base_proxy import BaseProxy, get_member
from .endpoints import RestAPIEntityType, create_endpoint_provider
from .exceptions import (
    DecodeError,
    InvalidAddressError,
    InvalidAllowedDeltaError,
    NilAddressError,
    NilNetworkConfigsError,
)
from .finality import MIN_ALLOWED_DELTA_TO_FINAL, create_finality_provider
from .models import (
    Account,
    ArgCreateTransaction,
    EnableEpochsConfig,
    GenesisNodes,
    HyperBlock,
    NetworkConfig,
    NetworkEconomics,
    RatingsConfig,
    Transaction,
    TransactionOnNetwork,
    TxCostResponseData,
    VMOutputApi,
    VmValueRequest,
)
from .sharding import METACHAIN_SHARD_ID
from .transport import DEFAULT_TIMEOUT, HttpClientWrapper

WITH_RESULTS_QUERY_PARAM = '?withResults=true'


@dataclass
class ProxyArgs:
    """Settings for EgldClient"""
    proxy_url: str
    session: Optional[requests.Session] = None
    same_sc_state: bool = False
    should_be_synced: bool = False
    finality_check: bool = False
    allowed_delta_to_final: int = MIN_ALLOWED_DELTA_TO_FINAL
    cache_expiration: float = 60.0
    entity_type: RestAPIEntityType = RestAPIEntityType.PROXY
    timeout: float = DEFAULT_TIMEOUT


def _decode_raw(data: Any, member: str) -> bytes:
    try:
        return base64.b64decode(get_member(data, member), validate=True)
    except (binascii.Error, TypeError, ValueError) as exc:
        raise DecodeError(f"invalid base64 in '{member}': {exc}") from exc


class EgldClient(BaseProxy):
    """
    Client for an EGLD proxy or observer node.

    Example:
        >>> client = EgldClient(ProxyArgs("https://testnet-gateway.elrond.com"))
        >>> config = client.get_network_config()
        >>> print(f"Chain: {config.chain_id}")
    """

    def __init__(self, args: ProxyArgs):
        """
        Initialize the client.

        Args:
            args: ProxyArgs with the URL and behaviour settings

        Raises:
            InvalidAllowedDeltaError: finality check on with a delta below 1
            InvalidCacheDurationError: cache_expiration below one second
            UnknownEntityTypeError: entity_type is not a RestAPIEntityType
        """
        if args.finality_check and args.allowed_delta_to_final < MIN_ALLOWED_DELTA_TO_FINAL:
            raise InvalidAllowedDeltaError(
                f"invalid value for the allowed delta to final, provided: {args.allowed_delta_to_final}, "
                f"minimum: {MIN_ALLOWED_DELTA_TO_FINAL}"
            )

        endpoint_provider = create_endpoint_provider(args.entity_type)
        http_client = HttpClientWrapper(args.proxy_url, session=args.session, timeout=args.timeout)
        super().__init__(http_client, endpoint_provider, args.cache_expiration)

        self.same_sc_state = args.same_sc_state
        self.should_be_synced = args.should_be_synced
        self.finality_check = args.finality_check
        self.allowed_delta_to_final = args.allowed_delta_to_final
        self.finality_provider = create_finality_provider(self, args.finality_check)

    # Network Information
    #
    # Every operation takes an optional timeout: the deadline, in seconds, of
    # each request it sends. None falls back to ProxyArgs.timeout.

    def get_network_economics(self, timeout: Optional[float] = None) -> NetworkEconomics:
        data = self._get_data(self.endpoint_provider.get_network_economics(), timeout)
        return NetworkEconomics.from_dict(get_member(data, 'metrics'))

    def get_ratings_config(self, timeout: Optional[float] = None) -> RatingsConfig:
        data = self._get_data(self.endpoint_provider.get_ratings_config(), timeout)
        return RatingsConfig.from_dict(get_member(data, 'config'))

    def get_enable_epochs_config(self, timeout: Optional[float] = None) -> EnableEpochsConfig:
        data = self._get_data(self.endpoint_provider.get_enable_epochs_config(), timeout)
        return EnableEpochsConfig.from_dict(get_member(data, 'enableEpochs'))

    def get_genesis_nodes_pub_keys(self, timeout: Optional[float] = None) -> GenesisNodes:
        data = self._get_data(self.endpoint_provider.get_genesis_nodes_config(), timeout)
        return GenesisNodes.from_dict(get_member(data, 'nodes'))

    def get_latest_hyper_block_nonce(self, timeout: Optional[float] = None) -> int:
        """Latest hyper block (metachain) nonce"""
        return self.get_network_status(METACHAIN_SHARD_ID, timeout).nonce

    def get_nonce_at_epoch_start(self, shard_id: int, timeout: Optional[float] = None) -> int:
        return self.get_network_status(shard_id, timeout).nonce_at_epoch_start

    # Finality

    def check_final_state(self, bech32_address: str, timeout: Optional[float] = None):
        """
        Make sure the shard of an address is final before reading its state.

        Does nothing when finality checking is turned off.
        """
        if not self.finality_check:
            return

        target_shard_id = self.get_shard_of_address(bech32_address, timeout)
        self.finality_provider.check_shard_finalization(
            target_shard_id, self.allowed_delta_to_final, timeout)

    # Accounts

    def get_account(self, address: Optional[Address], timeout: Optional[float] = None) -> Account:
        """
        Account info (nonce, balance).

        Args:
            address: Account address
            timeout: Request deadline in seconds

        Returns:
            Account object
        """
        if address is None:
            raise NilAddressError("nil address")
        if not address.is_valid():
            raise InvalidAddressError(f"invalid address: {address!r}")

        bech32_address = address.to_bech32()
        self.check_final_state(bech32_address, timeout)

        data = self._get_data(self.endpoint_provider.get_account(bech32_address), timeout)
        return Account.from_dict(get_member(data, 'account'))

    def get_default_transaction_arguments(
        self,
        address: Optional[Address],
        network_configs: Optional[NetworkConfig],
    ) -> ArgCreateTransaction:
        """
        Transaction arguments filled from the network configs.

        Nonce, value and receiver are left for the caller.

        Raises:
            NilNetworkConfigsError: network_configs is None
            NilAddressError: address is None
        """
        if network_configs is None:
            raise NilNetworkConfigsError("nil network configs")
        if address is None:
            raise NilAddressError("nil address")

        return ArgCreateTransaction(
            snd_addr=address.to_bech32(),
            gas_price=network_configs.min_gas_price,
            gas_limit=network_configs.min_gas_limit,
            chain_id=network_configs.chain_id,
            version=network_configs.min_transaction_version,
        )

    # Transactions

    def send_transaction(self, transaction: Transaction, timeout: Optional[float] = None) -> str:
        """
        Broadcast a signed transaction.

        Returns:
            Transaction hash
        """
        data = self._post_data(self.endpoint_provider.get_send_transaction(), transaction.to_dict(), timeout)
        tx_hash = get_member(data, 'txHash')
        if not isinstance(tx_hash, str):
            raise DecodeError(f"invalid txHash: {tx_hash!r}")
        return tx_hash

    def send_transactions(self, transactions: List[Transaction], timeout: Optional[float] = None) -> List[str]:
        """
        Broadcast several signed transactions.

        Returns:
            Transaction hashes, in the order the transactions were given
        """
        payload = [tx.to_dict() for tx in transactions]
        data = self._post_data(self.endpoint_provider.get_send_multiple_transactions(), payload, timeout)
        hashes = get_member(data, 'txsHashes')
        if not isinstance(hashes, dict):
            raise DecodeError(f"invalid txsHashes: {hashes!r}")
        return order_sent_hashes(hashes)

    def get_transaction_status(self, tx_hash: str, timeout: Optional[float] = None) -> str:
        data = self._get_data(self.endpoint_provider.get_transaction_status(tx_hash), timeout)
        status = get_member(data, 'status')
        if not isinstance(status, str):
            raise DecodeError(f"invalid transaction status: {status!r}")
        return status

    def get_transaction_info(self, tx_hash: str, timeout: Optional[float] = None) -> TransactionOnNetwork:
        return self._get_transaction_info(tx_hash, False, timeout)

    def get_transaction_info_with_results(
        self,
        tx_hash: str,
        timeout: Optional[float] = None,
    ) -> TransactionOnNetwork:
        """Transaction details including smart contract results"""
        return self._get_transaction_info(tx_hash, True, timeout)

    def _get_transaction_info(
        self,
        tx_hash: str,
        with_results: bool,
        timeout: Optional[float],
    ) -> TransactionOnNetwork:
        endpoint = self.endpoint_provider.get_transaction_info(tx_hash)
        if with_results:
            endpoint += WITH_RESULTS_QUERY_PARAM
        data = self._get_data(endpoint, timeout)
        return TransactionOnNetwork.from_dict(get_member(data, 'transaction'))

    def request_transaction_cost(
        self,
        transaction: Transaction,
        timeout: Optional[float] = None,
    ) -> TxCostResponseData:
        """Gas units the transaction would consume"""
        data = self._post_data(self.endpoint_provider.get_cost_transaction(), transaction.to_dict(), timeout)
        return TxCostResponseData.from_dict(data)

    # Smart contracts

    def execute_vm_query(self, vm_request: VmValueRequest, timeout: Optional[float] = None) -> VMOutputApi:
        """Read smart contract state through the VM"""
        self.check_final_state(vm_request.address, timeout)

        payload = vm_request.to_dict()
        payload['sameScState'] = self.same_sc_state
        payload['shouldBeSynced'] = self.should_be_synced
        data = self._post_data(self.endpoint_provider.get_vm_values(), payload, timeout)
        return VMOutputApi.from_dict(get_member(data, 'data'))

    # Blocks

    def get_hyper_block_by_nonce(self, nonce: int, timeout: Optional[float] = None) -> HyperBlock:
        return self._get_hyper_block(self.endpoint_provider.get_hyper_block_by_nonce(nonce), timeout)

    def get_hyper_block_by_hash(self, block_hash: str, timeout: Optional[float] = None) -> HyperBlock:
        return self._get_hyper_block(self.endpoint_provider.get_hyper_block_by_hash(block_hash), timeout)

    def _get_hyper_block(self, endpoint: str, timeout: Optional[float]) -> HyperBlock:
        data = self._get_data(endpoint, timeout)
        return HyperBlock.from_dict(get_member(data, 'hyperblock'))

    def get_raw_block_by_hash(self, shard_id: int, block_hash: str, timeout: Optional[float] = None) -> bytes:
        endpoint = self.endpoint_provider.get_raw_block_by_hash(shard_id, block_hash)
        return _decode_raw(self._get_data(endpoint, timeout), 'block')

    def get_raw_block_by_nonce(self, shard_id: int, nonce: int, timeout: Optional[float] = None) -> bytes:
        endpoint = self.endpoint_provider.get_raw_block_by_nonce(shard_id, nonce)
        return _decode_raw(self._get_data(endpoint, timeout), 'block')

    def get_raw_start_of_epoch_meta_block(self, epoch: int, timeout: Optional[float] = None) -> bytes:
        endpoint = self.endpoint_provider.get_raw_start_of_epoch_meta_block(epoch)
        return _decode_raw(self._get_data(endpoint, timeout), 'block')

    def get_raw_mini_block_by_hash(
        self,
        shard_id: int,
        block_hash: str,
        epoch: int,
        timeout: Optional[float] = None,
    ) -> bytes:
        endpoint = self.endpoint_provider.get_raw_mini_block_by_hash(shard_id, block_hash, epoch)
        return _decode_raw(self._get_data(endpoint, timeout), 'miniblock')


def order_sent_hashes(hashes: dict) -> List[str]:
    """
    Hashes of a send-multiple response, by ascending batch index.

    The response maps each transaction's index in the batch to its hash;
    JSON object keys carry no order.
    """
    try:
        indexed = sorted((int(index), tx_hash) for index, tx_hash in hashes.items())
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"invalid txsHashes: {hashes!r}") from exc
    return [tx_hash for _, tx_hash in indexed]
