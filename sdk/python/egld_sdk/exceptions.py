"""
Exception hierarchy for the EGLD SDK
"""

from typing import Optional


class EgldError(Exception):
    """Base class for every error raised by the SDK"""


# Construction errors

class InvalidNumberOfShardsError(EgldError, ValueError):
    """The number of shards must be greater than zero"""


class InvalidShardIdError(EgldError, ValueError):
    """Shard id must be smaller than the total number of shards"""


class InvalidCacheDurationError(EgldError, ValueError):
    """Cache expiration is below the minimum caching interval"""


class InvalidAllowedDeltaError(EgldError, ValueError):
    """Allowed nonce delta to final is below the minimum"""


class UnknownEntityTypeError(EgldError, ValueError):
    """Unknown REST API entity type"""


class NilDependencyError(EgldError, ValueError):
    """A required collaborator was not provided"""


# Argument errors

class NilAddressError(EgldError, ValueError):
    """Address was not provided"""


class InvalidAddressError(EgldError, ValueError):
    """Address is empty, malformed or of the wrong length"""


class InvalidPrivateKeyError(EgldError, ValueError):
    """Private key is not a 32-byte seed or a 64-byte seed + public key"""


class NilNetworkConfigsError(EgldError, ValueError):
    """Network configs were not provided"""


class InvalidBalanceError(EgldError, ValueError):
    """Account balance is not a valid number"""


# Network errors

class HttpStatusError(EgldError):
    """
    Request failed at the transport level.

    status_code is 0 when no response was received at all (connection
    failure, timeout), otherwise the HTTP status returned by the server.
    """

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class RequestTimeoutError(HttpStatusError):
    """The request deadline passed before a response arrived"""

    def __init__(self, message: str):
        super().__init__(message, 0)


class RemoteError(EgldError):
    """The response envelope carried a non-empty error field"""

    def __init__(self, message: str, code: str = ''):
        super().__init__(message)
        self.code = code


class DecodeError(EgldError):
    """Response body is not valid JSON or has an unexpected shape"""


class NilNetworkStatusError(EgldError):
    """Network status response did not contain a status"""


class ShardIdMismatchError(EgldError):
    """Observer answered from a different shard than the one requested"""

    def __init__(self, requested: int, received: int):
        super().__init__(
            f"shard ID mismatch, requested from {requested}, got response from {received}"
        )
        self.requested = requested
        self.received = received


# Finality errors

class FinalityError(EgldError):
    """Base class for shard finalization failures"""

    def __init__(self, message: str, shard_id: Optional[int] = None):
        super().__init__(message)
        self.shard_id = shard_id


class ShardSyncingError(FinalityError):
    """Shard is behind the network head and is expected to catch up"""


class ShardStuckError(FinalityError):
    """Shard head is past its final nonce by more than the allowed delta"""


class NodeNotStartedError(FinalityError):
    """Node reported all nonces as zero"""


class InvalidCrossCheckFormatError(FinalityError):
    """Metachain cross check value could not be parsed for the shard"""
