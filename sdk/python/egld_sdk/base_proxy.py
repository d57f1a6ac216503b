"""
Shared request pipeline and cached network configuration
"""

import json
from typing import Any, Optional

from .address import Address
from .cache import NetworkConfigCache
from .endpoints import BaseEndpointProvider, RestAPIEntityType
from .exceptions import (
    DecodeError,
    HttpStatusError,
    NilDependencyError,
    NilNetworkStatusError,
    RemoteError,
    ShardIdMismatchError,
    UnknownEntityTypeError,
)
from .models import NetworkConfig, NetworkStatus
from .sharding import ShardCoordinator
from .transport import HttpClientWrapper

HTTP_OK = 200


def decode_envelope(buff: bytes) -> Any:
    """
    Unwrap a {"data": ..., "error": ..., "code": ...} response body.

    Returns:
        The "data" member

    Raises:
        DecodeError: body is not a JSON object
        RemoteError: the "error" member is not empty
    """
    try:
        response = json.loads(buff)
    except ValueError as exc:
        raise DecodeError(f"invalid JSON response: {exc}") from exc
    if not isinstance(response, dict):
        raise DecodeError(f"expected a JSON object, got {type(response).__name__}")

    error = response.get('error') or ''
    if error:
        raise RemoteError(error, response.get('code') or '')
    return response.get('data')


def get_member(data: Any, name: str) -> Any:
    """Required member of the envelope's data object"""
    if not isinstance(data, dict) or data.get(name) is None:
        raise DecodeError(f"response data has no '{name}' member")
    return data[name]


def create_http_status_error(code: int, buff: bytes) -> HttpStatusError:
    message = f"http status code {code}"
    try:
        error = json.loads(buff).get('error')
    except (ValueError, AttributeError):
        error = None
    if error:
        message += f", returned error: {error}"
    return HttpStatusError(message, code)


class BaseProxy:
    """
    Request/response plumbing shared by every proxy operation.

    Every call builds a route, sends it, rejects non-200 answers, unwraps the
    response envelope and raises on a remote error.
    """

    def __init__(
        self,
        http_client: HttpClientWrapper,
        endpoint_provider: BaseEndpointProvider,
        cache_expiration: float,
    ):
        if http_client is None:
            raise NilDependencyError("nil HTTP client wrapper")
        if endpoint_provider is None:
            raise NilDependencyError("nil endpoint provider")

        self.http_client = http_client
        self.endpoint_provider = endpoint_provider
        self._config_cache = NetworkConfigCache(self._get_network_config_from_source, cache_expiration)

    def _get_data(self, endpoint: str, timeout: Optional[float] = None) -> Any:
        buff, code = self.http_client.get_http(endpoint, timeout)
        if code != HTTP_OK:
            raise create_http_status_error(code, buff)
        return decode_envelope(buff)

    def _post_data(self, endpoint: str, payload: Any, timeout: Optional[float] = None) -> Any:
        body = json.dumps(payload, separators=(',', ':')).encode('utf-8')
        buff, code = self.http_client.post_http(endpoint, body, timeout)
        if code != HTTP_OK:
            raise create_http_status_error(code, buff)
        return decode_envelope(buff)

    def get_network_config(self, timeout: Optional[float] = None) -> NetworkConfig:
        """
        Network configuration, served from cache while fresh.

        Args:
            timeout: Deadline of the refresh request, if one is needed

        Returns:
            NetworkConfig object
        """
        return self._config_cache.get(timeout)

    def _get_network_config_from_source(self, timeout: Optional[float] = None) -> NetworkConfig:
        data = self._get_data(self.endpoint_provider.get_network_config(), timeout)
        return NetworkConfig.from_dict(get_member(data, 'config'))

    def get_shard_of_address(self, bech32_address: str, timeout: Optional[float] = None) -> int:
        """
        Shard of an address, using the network's current shard count.

        Args:
            bech32_address: Address such as "erd1..."
            timeout: Request deadline in seconds

        Returns:
            Shard id
        """
        address = Address.from_bech32(bech32_address)
        network_configs = self.get_network_config(timeout)
        coordinator = ShardCoordinator(network_configs.num_shards_without_meta, 0)
        return coordinator.compute_shard_id(address)

    def get_network_status(self, shard_id: int, timeout: Optional[float] = None) -> NetworkStatus:
        """
        Network status as seen by the given shard.

        Raises:
            NilNetworkStatusError: response carried no status
            ShardIdMismatchError: observer answered from another shard
        """
        data = self._get_data(self.endpoint_provider.get_node_status(shard_id), timeout)

        entity_type = self.endpoint_provider.get_rest_api_entity_type()
        if entity_type == RestAPIEntityType.PROXY:
            member = 'status'
        elif entity_type == RestAPIEntityType.OBSERVER_NODE:
            member = 'metrics'
        else:
            raise UnknownEntityTypeError(f"invalid endpoint provider: {entity_type}")

        raw_status = data.get(member) if isinstance(data, dict) else None
        if raw_status is None:
            raise NilNetworkStatusError(f"nil network status, requested from {shard_id}")

        status = NetworkStatus.from_dict(raw_status)
        self._check_received_node_status(status, shard_id)
        return status

    def _check_received_node_status(self, status: NetworkStatus, shard_id: int):
        if not self.endpoint_provider.should_check_shard_id_for_node_status():
            return
        if status.shard_id != shard_id:
            raise ShardIdMismatchError(shard_id, status.shard_id)

    def get_rest_api_entity_type(self) -> RestAPIEntityType:
        return self.endpoint_provider.get_rest_api_entity_type()

    def close(self):
        """Close the underlying session"""
        self.http_client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
