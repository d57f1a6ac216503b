"""
EGLD Python SDK

Python client for EGLD proxies and observer nodes.

Features:
- Proxy and observer node REST APIs
- Shard assignment of addresses
- Cached network configuration
- Shard finality checks before state reads
- Ed25519 transaction signing
- Per-sender nonce coordination
"""

__version__ = "1.0.0"
__author__ = "EGLD SDK Team"

from .address import Address
from .client import EgldClient, ProxyArgs
from .crypto import TransactionSigner
from .endpoints import RestAPIEntityType, create_endpoint_provider
from .exceptions import (
    EgldError,
    FinalityError,
    HttpStatusError,
    RemoteError,
    RequestTimeoutError,
    DecodeError,
    ShardSyncingError,
    ShardStuckError,
    ShardIdMismatchError,
)
from .finality import create_finality_provider
from .interactor import TransactionInteractor
from .models import (
    Account,
    ArgCreateTransaction,
    HyperBlock,
    NetworkConfig,
    NetworkStatus,
    Transaction,
)
from .nonces import NonceCoordinator
from .sharding import ShardCoordinator, METACHAIN_SHARD_ID
from .utils import Utils

__all__ = [
    "Address",
    "EgldClient",
    "ProxyArgs",
    "TransactionSigner",
    "RestAPIEntityType",
    "create_endpoint_provider",
    "create_finality_provider",
    "EgldError",
    "FinalityError",
    "HttpStatusError",
    "RemoteError",
    "RequestTimeoutError",
    "DecodeError",
    "ShardSyncingError",
    "ShardStuckError",
    "ShardIdMismatchError",
    "TransactionInteractor",
    "Account",
    "ArgCreateTransaction",
    "HyperBlock",
    "NetworkConfig",
    "NetworkStatus",
    "Transaction",
    "NonceCoordinator",
    "ShardCoordinator",
    "METACHAIN_SHARD_ID",
    "Utils",
]
