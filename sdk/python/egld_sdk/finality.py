"""
Shard finality checks

A shard is considered final when the nonce it reports is not behind the
network head, nor ahead of the last finalized nonce, by more than a tolerated
delta. Two strategies exist, one per REST API personality.
"""

import logging
from typing import Optional, Tuple

from .endpoints import RestAPIEntityType
from .exceptions import (
    InvalidAllowedDeltaError,
    InvalidCrossCheckFormatError,
    NilDependencyError,
    NodeNotStartedError,
    ShardStuckError,
    ShardSyncingError,
    UnknownEntityTypeError,
)
from .sharding import METACHAIN_SHARD_ID
from .utils import Utils

logger = logging.getLogger(__name__)

MIN_ALLOWED_DELTA_TO_FINAL = 1


def check_delta(max_nonces_delta: int):
    if max_nonces_delta < MIN_ALLOWED_DELTA_TO_FINAL:
        raise InvalidAllowedDeltaError(
            f"invalid value for the allowed delta to final, provided: {max_nonces_delta}, "
            f"minimum: {MIN_ALLOWED_DELTA_TO_FINAL}"
        )


class DisabledFinalityProvider:
    """Used when finality checking is turned off"""

    def check_shard_finalization(self, target_shard_id: int, max_nonces_delta: int,
                                 timeout: Optional[float] = None):
        return None


class NodeFinalityProvider:
    """
    Checks finality using the nonces an observer reports about itself.

    Args:
        proxy: Anything exposing get_network_status(shard_id, timeout)
    """

    def __init__(self, proxy):
        if proxy is None:
            raise NilDependencyError("nil proxy")
        self.proxy = proxy

    def check_shard_finalization(self, target_shard_id: int, max_nonces_delta: int,
                                 timeout: Optional[float] = None):
        """
        Raises:
            InvalidAllowedDeltaError: max_nonces_delta < 1
            NodeNotStartedError: every reported nonce is zero
            ShardSyncingError: node is behind the network's probable head
            ShardStuckError: node head is past its highest final nonce + delta
        """
        check_delta(max_nonces_delta)

        current, highest, probable = self._get_nonces(target_shard_id, timeout)
        shard = Utils.get_shard_id_string(target_shard_id)

        if current + max_nonces_delta < probable:
            raise ShardSyncingError(
                f"shardID {shard} is syncing, probable nonce is {probable}, "
                f"current nonce is {current}, max delta: {max_nonces_delta}",
                target_shard_id,
            )
        if current > highest + max_nonces_delta:
            raise ShardStuckError(
                f"shardID {shard} is stuck, highest nonce is {highest}, "
                f"current nonce is {current}, max delta: {max_nonces_delta}",
                target_shard_id,
            )

        logger.debug(
            "NodeFinalityProvider.check_shard_finalization - shard is in sync: "
            "shardID=%s highest=%d probable=%d current=%d max delta=%d",
            shard, highest, probable, current, max_nonces_delta,
        )

    def _get_nonces(self, target_shard_id: int, timeout: Optional[float]) -> Tuple[int, int, int]:
        status = self.proxy.get_network_status(target_shard_id, timeout)
        current = status.nonce
        highest = status.highest_nonce
        probable = status.probable_highest_nonce
        if current == 0 and highest == 0 and probable == 0:
            raise NodeNotStartedError("node not started", target_shard_id)
        return current, highest, probable


class ProxyFinalityProvider:
    """
    Checks finality against the metachain's cross check of each shard.

    Args:
        proxy: Anything exposing get_network_status(shard_id, timeout)
    """

    def __init__(self, proxy):
        if proxy is None:
            raise NilDependencyError("nil proxy")
        self.proxy = proxy

    def check_shard_finalization(self, target_shard_id: int, max_nonces_delta: int,
                                 timeout: Optional[float] = None):
        """
        Raises:
            InvalidAllowedDeltaError: max_nonces_delta < 1
            InvalidCrossCheckFormatError: metachain cross check is unusable
            ShardSyncingError: shard is behind what the metachain notarized
            ShardStuckError: shard is past the notarized nonce + delta
        """
        check_delta(max_nonces_delta)
        # the metachain notarizes itself, any delta >= 1 accepts it
        if target_shard_id == METACHAIN_SHARD_ID:
            return

        nonce_from_meta, nonce_from_shard = self._get_nonces_from_meta_and_shard(target_shard_id, timeout)

        if nonce_from_shard < nonce_from_meta:
            raise ShardSyncingError(
                f"shardID {target_shard_id} is syncing, meta cross check nonce is {nonce_from_meta}, "
                f"current nonce is {nonce_from_shard}, max delta: {max_nonces_delta}",
                target_shard_id,
            )
        if nonce_from_shard > nonce_from_meta + max_nonces_delta:
            raise ShardStuckError(
                f"shardID {target_shard_id} is stuck, meta cross check nonce is {nonce_from_meta}, "
                f"current nonce is {nonce_from_shard}, max delta: {max_nonces_delta}",
                target_shard_id,
            )

        logger.debug(
            "ProxyFinalityProvider.check_shard_finalization - shard is in sync: "
            "shardID=%d meta cross check nonce=%d current=%d max delta=%d",
            target_shard_id, nonce_from_meta, nonce_from_shard, max_nonces_delta,
        )

    def _get_nonces_from_meta_and_shard(self, target_shard_id: int,
                                        timeout: Optional[float]) -> Tuple[int, int]:
        status_meta = self.proxy.get_network_status(METACHAIN_SHARD_ID, timeout)
        nonce_from_meta = extract_nonce_of_shard_id(status_meta.cross_check_block_height, target_shard_id)

        status_shard = self.proxy.get_network_status(target_shard_id, timeout)
        return nonce_from_meta, status_shard.nonce


def extract_nonce_of_shard_id(cross_check_value: str, shard_id: int) -> int:
    """
    Nonce the metachain notarized for a shard.

    Args:
        cross_check_value: Comma separated "<shard>: <nonce>" pairs,
            e.g. "0: 500, 1: 510, 2: 495,"
        shard_id: Shard to look up

    Raises:
        InvalidCrossCheckFormatError: value is empty, the shard is missing,
            or its nonce is not a number
    """
    if not cross_check_value:
        raise InvalidCrossCheckFormatError(
            "invalid nonce cross check value format: empty value, maybe bad observer version",
            shard_id,
        )

    wanted = str(shard_id)
    for shard_data in cross_check_value.split(','):
        parts = shard_data.split(':')
        if len(parts) != 2:
            continue

        shard, nonce = parts[0].strip(), parts[1].strip()
        if shard != wanted:
            continue
        if not (nonce.isascii() and nonce.isdigit()):
            raise InvalidCrossCheckFormatError(
                f"invalid nonce cross check value format: {nonce} is not a valid number "
                f"as found in this response: {cross_check_value}",
                shard_id,
            )
        return int(nonce)

    raise InvalidCrossCheckFormatError(
        f"invalid nonce cross check value format: value not found for shard {shard_id} "
        f"from this response: {cross_check_value}",
        shard_id,
    )


def create_finality_provider(proxy, check_finality: bool):
    """
    Finality provider matching the proxy's REST API entity type.

    Returns the disabled provider when check_finality is off.
    """
    if not check_finality:
        return DisabledFinalityProvider()
    if proxy is None:
        raise NilDependencyError("nil proxy")

    entity_type = proxy.get_rest_api_entity_type()
    if entity_type == RestAPIEntityType.OBSERVER_NODE:
        return NodeFinalityProvider(proxy)
    if entity_type == RestAPIEntityType.PROXY:
        return ProxyFinalityProvider(proxy)
    raise UnknownEntityTypeError(f"unknown REST API entity type: {entity_type}")
