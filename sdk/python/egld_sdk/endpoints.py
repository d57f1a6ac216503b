"""
REST route templates for the two API personalities
"""

from abc import ABC, abstractmethod
from enum import Enum

from .exceptions import UnknownEntityTypeError


class RestAPIEntityType(str, Enum):
    """Kind of REST API the client talks to"""
    PROXY = 'Proxy'
    OBSERVER_NODE = 'Observer'


class BaseEndpointProvider(ABC):
    """Routes shared by proxies and observer nodes"""

    def get_network_config(self) -> str:
        return 'network/config'

    def get_network_economics(self) -> str:
        return 'network/economics'

    def get_ratings_config(self) -> str:
        return 'network/ratings'

    def get_enable_epochs_config(self) -> str:
        return 'network/enable-epochs'

    def get_account(self, address_as_bech32: str) -> str:
        return f'address/{address_as_bech32}'

    def get_cost_transaction(self) -> str:
        return 'transaction/cost'

    def get_send_transaction(self) -> str:
        return 'transaction/send'

    def get_send_multiple_transactions(self) -> str:
        return 'transaction/send-multiple'

    def get_transaction_status(self, hex_hash: str) -> str:
        return f'transaction/{hex_hash}/status'

    def get_transaction_info(self, hex_hash: str) -> str:
        return f'transaction/{hex_hash}'

    def get_hyper_block_by_nonce(self, nonce: int) -> str:
        return f'hyperblock/by-nonce/{nonce}'

    def get_hyper_block_by_hash(self, hex_hash: str) -> str:
        return f'hyperblock/by-hash/{hex_hash}'

    def get_vm_values(self) -> str:
        return 'vm-values/query'

    def get_genesis_nodes_config(self) -> str:
        return 'network/genesis-nodes'

    def get_raw_start_of_epoch_meta_block(self, epoch: int) -> str:
        return f'internal/raw/startofepoch/metablock/by-epoch/{epoch}'

    @abstractmethod
    def get_node_status(self, shard_id: int) -> str:
        raise NotImplementedError

    @abstractmethod
    def should_check_shard_id_for_node_status(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_raw_block_by_hash(self, shard_id: int, hex_hash: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_raw_block_by_nonce(self, shard_id: int, nonce: int) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_raw_mini_block_by_hash(self, shard_id: int, hex_hash: str, epoch: int) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_rest_api_entity_type(self) -> RestAPIEntityType:
        raise NotImplementedError


class NodeEndpointProvider(BaseEndpointProvider):
    """
    Routes for a single observer node.

    The node serves exactly one shard, so shard ids are not part of the
    routes. An observer may be misconfigured, so callers must check the shard
    it reports in its status.
    """

    def get_node_status(self, shard_id: int) -> str:
        return 'node/status'

    def should_check_shard_id_for_node_status(self) -> bool:
        return True

    def get_raw_block_by_hash(self, shard_id: int, hex_hash: str) -> str:
        return f'internal/raw/block/by-hash/{hex_hash}'

    def get_raw_block_by_nonce(self, shard_id: int, nonce: int) -> str:
        return f'internal/raw/block/by-nonce/{nonce}'

    def get_raw_mini_block_by_hash(self, shard_id: int, hex_hash: str, epoch: int) -> str:
        return f'internal/raw/miniblock/by-hash/{hex_hash}/epoch/{epoch}'

    def get_rest_api_entity_type(self) -> RestAPIEntityType:
        return RestAPIEntityType.OBSERVER_NODE


class ProxyEndpointProvider(BaseEndpointProvider):
    """Routes for a proxy that dispatches to every shard"""

    def get_node_status(self, shard_id: int) -> str:
        return f'network/status/{shard_id}'

    def should_check_shard_id_for_node_status(self) -> bool:
        return False

    def get_raw_block_by_hash(self, shard_id: int, hex_hash: str) -> str:
        return f'internal/{shard_id}/raw/block/by-hash/{hex_hash}'

    def get_raw_block_by_nonce(self, shard_id: int, nonce: int) -> str:
        return f'internal/{shard_id}/raw/block/by-nonce/{nonce}'

    def get_raw_mini_block_by_hash(self, shard_id: int, hex_hash: str, epoch: int) -> str:
        return f'internal/{shard_id}/raw/miniblock/by-hash/{hex_hash}/epoch/{epoch}'

    def get_rest_api_entity_type(self) -> RestAPIEntityType:
        return RestAPIEntityType.PROXY


def create_endpoint_provider(entity_type) -> BaseEndpointProvider:
    """
    Endpoint provider for the given REST API entity type.

    Raises:
        UnknownEntityTypeError: entity_type is neither proxy nor observer
    """
    if entity_type == RestAPIEntityType.OBSERVER_NODE:
        return NodeEndpointProvider()
    if entity_type == RestAPIEntityType.PROXY:
        return ProxyEndpointProvider()
    raise UnknownEntityTypeError(f"unknown REST API entity type: {entity_type}")
