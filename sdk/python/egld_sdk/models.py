"""
Data models for the EGLD SDK
"""

import base64
import binascii
from dataclasses import dataclass, field, fields
from enum import IntFlag
from typing import Any, Dict, List, Optional

from .exceptions import DecodeError, InvalidBalanceError
from .utils import Utils


def _key(name: str):
    return field(default=None, metadata={'json': name})


def _to_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise DecodeError(f"field {name}: expected a number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise DecodeError(f"field {name}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"field {name}: expected a number, got {value!r}") from exc


def _to_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise DecodeError(f"field {name}: expected a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"field {name}: expected a number, got {value!r}") from exc


def _to_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    # some flags are sent as quoted booleans
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    raise DecodeError(f"field {name}: expected a boolean, got {value!r}")


def _to_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"field {name}: expected a string, got {value!r}")
    return value


def _to_bytes(value: Any, name: str) -> bytes:
    if value == '':
        return b''
    try:
        return base64.b64decode(_to_str(value, name), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"field {name}: invalid base64 value {value!r}") from exc


_CONVERTERS = {
    int: _to_int,
    float: _to_float,
    bool: _to_bool,
    str: _to_str,
    bytes: _to_bytes,
}

_DEFAULTS = {int: 0, float: 0.0, bool: False, str: '', bytes: b''}


def _decode(cls, data: Any):
    """
    Build dataclass `cls` from a decoded JSON object.

    Keys are looked up under each field's 'json' metadata name. Absent or
    null keys take the zero value of the field type; present keys with the
    wrong type raise DecodeError.
    """
    if not isinstance(data, dict):
        raise DecodeError(f"{cls.__name__}: expected a JSON object, got {type(data).__name__}")

    values = {}
    for f in fields(cls):
        key = f.metadata.get('json', f.name)
        decoder = f.metadata.get('decode')
        raw = data.get(key)
        if decoder is not None:
            values[f.name] = decoder(raw, key)
        elif raw is None:
            values[f.name] = _DEFAULTS[f.type]
        else:
            values[f.name] = _CONVERTERS[f.type](raw, key)
    return cls(**values)


def _list_of(cls):
    def decode(raw, key):
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise DecodeError(f"field {key}: expected a list, got {raw!r}")
        return [_decode(cls, item) for item in raw]
    return decode


def _list_field(name: str, cls):
    return field(default_factory=list, metadata={'json': name, 'decode': _list_of(cls)})


@dataclass
class NetworkConfig:
    """Network configuration parameters"""
    chain_id: str = _key('erd_chain_id')
    denomination: int = _key('erd_denomination')
    gas_per_data_byte: int = _key('erd_gas_per_data_byte')
    latest_tag_software_version: str = _key('erd_latest_tag_software_version')
    meta_consensus_group: int = _key('erd_meta_consensus_group_size')
    min_gas_limit: int = _key('erd_min_gas_limit')
    min_gas_price: int = _key('erd_min_gas_price')
    min_transaction_version: int = _key('erd_min_transaction_version')
    num_metachain_nodes: int = _key('erd_num_metachain_nodes')
    num_nodes_in_shard: int = _key('erd_num_nodes_in_shard')
    num_shards_without_meta: int = _key('erd_num_shards_without_meta')
    round_duration: int = _key('erd_round_duration')
    shard_consensus_group_size: int = _key('erd_shard_consensus_group_size')
    start_time: int = _key('erd_start_time')
    adaptivity: bool = _key('erd_adaptivity')
    hysteresis: float = _key('erd_hysteresis')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkConfig':
        return _decode(cls, data)


@dataclass
class NetworkEconomics:
    """Network economics details"""
    dev_rewards: str = _key('erd_dev_rewards')
    epoch_for_economics_data: int = _key('erd_epoch_for_economics_data')
    inflation: str = _key('erd_inflation')
    total_fees: str = _key('erd_total_fees')
    total_staked_value: str = _key('erd_total_staked_value')
    total_supply: str = _key('erd_total_supply')
    total_top_up_value: str = _key('erd_total_top_up_value')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkEconomics':
        return _decode(cls, data)


@dataclass
class SelectionChances:
    chance_percent: int = _key('erd_chance_percent')
    max_threshold: int = _key('erd_max_threshold')


@dataclass
class RatingsConfig:
    """Ratings configuration parameters"""
    general_max_rating: int = _key('erd_ratings_general_max_rating')
    general_min_rating: int = _key('erd_ratings_general_min_rating')
    general_signed_blocks_threshold: float = _key('erd_ratings_general_signed_blocks_threshold')
    general_start_rating: int = _key('erd_ratings_general_start_rating')
    general_selection_chances: List[SelectionChances] = _list_field(
        'erd_ratings_general_selection_chances', SelectionChances)
    metachain_consecutive_missed_blocks_penalty: float = _key(
        'erd_ratings_metachain_consecutive_missed_blocks_penalty')
    metachain_hours_to_max_rating_from_start_rating: int = _key(
        'erd_ratings_metachain_hours_to_max_rating_from_start_rating')
    metachain_proposer_decrease_factor: float = _key('erd_ratings_metachain_proposer_decrease_factor')
    metachain_proposer_validator_importance: float = _key(
        'erd_ratings_metachain_proposer_validator_importance')
    metachain_validator_decrease_factor: float = _key('erd_ratings_metachain_validator_decrease_factor')
    peerhonesty_bad_peer_threshold: float = _key('erd_ratings_peerhonesty_bad_peer_threshold')
    peerhonesty_decay_coefficient: float = _key('erd_ratings_peerhonesty_decay_coefficient')
    peerhonesty_decay_update_interval_inseconds: int = _key(
        'erd_ratings_peerhonesty_decay_update_interval_inseconds')
    peerhonesty_max_score: float = _key('erd_ratings_peerhonesty_max_score')
    peerhonesty_min_score: float = _key('erd_ratings_peerhonesty_min_score')
    peerhonesty_unit_value: float = _key('erd_ratings_peerhonesty_unit_value')
    shardchain_consecutive_missed_blocks_penalty: float = _key(
        'erd_ratings_shardchain_consecutive_missed_blocks_penalty')
    shardchain_hours_to_max_rating_from_start_rating: int = _key(
        'erd_ratings_shardchain_hours_to_max_rating_from_start_rating')
    shardchain_proposer_decrease_factor: float = _key('erd_ratings_shardchain_proposer_decrease_factor')
    shardchain_proposer_validator_importance: float = _key(
        'erd_ratings_shardchain_proposer_validator_importance')
    shardchain_validator_decrease_factor: float = _key('erd_ratings_shardchain_validator_decrease_factor')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RatingsConfig':
        return _decode(cls, data)


@dataclass
class MaxNodesChangeConfig:
    epoch_enable: int = _key('erd_epoch_enable')
    max_num_nodes: int = _key('erd_max_num_nodes')
    nodes_to_shuffle_per_shard: int = _key('erd_nodes_to_shuffle_per_shard')


@dataclass
class EnableEpochsConfig:
    """Enable epochs configuration parameters"""
    balance_waiting_lists_enable_epoch: int = _key('erd_balance_waiting_lists_enable_epoch')
    waiting_list_fix_enable_epoch: int = _key('erd_waiting_list_fix_enable_epoch')
    max_nodes_change_enable_epoch: List[MaxNodesChangeConfig] = _list_field(
        'erd_max_nodes_change_enable_epoch', MaxNodesChangeConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EnableEpochsConfig':
        return _decode(cls, data)


def _keys_per_shard(raw, key) -> Dict[int, List[str]]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise DecodeError(f"field {key}: expected an object, got {raw!r}")
    result = {}
    for shard, keys in raw.items():
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise DecodeError(f"field {key}: expected a list of public keys for shard {shard}")
        result[_to_int(shard, key)] = keys
    return result


@dataclass
class GenesisNodes:
    """Genesis nodes public keys per shard"""
    eligible: Dict[int, List[str]] = field(
        default_factory=dict, metadata={'decode': _keys_per_shard})
    waiting: Dict[int, List[str]] = field(
        default_factory=dict, metadata={'decode': _keys_per_shard})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenesisNodes':
        return _decode(cls, data)


@dataclass
class Account:
    """Account information (nonce, balance)"""
    address: str = _key('address')
    nonce: int = _key('nonce')
    balance: str = _key('balance')
    code: str = _key('code')
    code_hash: bytes = _key('codeHash')
    root_hash: bytes = _key('rootHash')
    code_metadata: bytes = _key('codeMetadata')
    username: str = _key('username')
    developer_reward: str = _key('developerReward')
    owner_address: str = _key('ownerAddress')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        return _decode(cls, data)

    def get_balance(self, decimals: int) -> float:
        """
        Balance denominated with the given number of decimals.

        Raises:
            InvalidBalanceError: balance is not a base-10 integer string
        """
        if not (self.balance.isascii() and self.balance.isdigit()):
            raise InvalidBalanceError(f"invalid balance: {self.balance!r}")
        return float(Utils.from_smallest_unit(int(self.balance), decimals))


@dataclass
class NetworkStatus:
    """Network status of a shard"""
    current_round: int = _key('erd_current_round')
    epoch_number: int = _key('erd_epoch_number')
    nonce: int = _key('erd_nonce')
    nonce_at_epoch_start: int = _key('erd_nonce_at_epoch_start')
    nonces_passed_in_current_epoch: int = _key('erd_nonces_passed_in_current_epoch')
    round_at_epoch_start: int = _key('erd_round_at_epoch_start')
    rounds_passed_in_current_epoch: int = _key('erd_rounds_passed_in_current_epoch')
    rounds_per_epoch: int = _key('erd_rounds_per_epoch')
    cross_check_block_height: str = _key('erd_cross_check_block_height')
    highest_nonce: int = _key('erd_highest_final_nonce')
    probable_highest_nonce: int = _key('erd_probable_highest_nonce')
    shard_id: int = _key('erd_shard_id')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkStatus':
        return _decode(cls, data)


@dataclass
class SmartContractResult:
    hash: str = _key('hash')
    nonce: int = _key('nonce')
    value: int = _key('value')
    receiver: str = _key('receiver')
    sender: str = _key('sender')
    data: str = _key('data')
    prev_tx_hash: str = _key('prevTxHash')
    original_tx_hash: str = _key('originalTxHash')
    gas_limit: int = _key('gasLimit')
    gas_price: int = _key('gasPrice')
    call_type: int = _key('callType')
    return_message: str = _key('returnMessage')


@dataclass
class TransactionOnNetwork:
    """A transaction as reported by the network"""
    type: str = _key('type')
    hash: str = _key('hash')
    nonce: int = _key('nonce')
    value: int = _key('value')
    receiver: str = _key('receiver')
    sender: str = _key('sender')
    gas_price: int = _key('gasPrice')
    gas_limit: int = _key('gasLimit')
    data: bytes = _key('data')
    signature: str = _key('signature')
    source_shard: int = _key('sourceShard')
    destination_shard: int = _key('destinationShard')
    miniblock_type: str = _key('miniblockType')
    miniblock_hash: str = _key('miniblockHash')
    status: str = _key('status')
    hyperblock_nonce: int = _key('hyperblockNonce')
    hyperblock_hash: str = _key('hyperblockHash')
    smart_contract_results: List[SmartContractResult] = _list_field(
        'smartContractResults', SmartContractResult)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransactionOnNetwork':
        return _decode(cls, data)


@dataclass
class ShardBlock:
    hash: str = _key('hash')
    nonce: int = _key('nonce')
    shard: int = _key('shard')


@dataclass
class HyperBlock:
    """Metachain block together with the shard blocks it notarized"""
    nonce: int = _key('nonce')
    round: int = _key('round')
    hash: str = _key('hash')
    prev_block_hash: str = _key('prevBlockHash')
    epoch: int = _key('epoch')
    num_txs: int = _key('numTxs')
    shard_blocks: List[ShardBlock] = _list_field('shardBlocks', ShardBlock)
    transactions: List[TransactionOnNetwork] = _list_field('transactions', TransactionOnNetwork)
    timestamp: int = _key('timestamp')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HyperBlock':
        return _decode(cls, data)


@dataclass
class TxCostResponseData:
    """Gas units a transaction would consume"""
    tx_cost: int = _key('txGasUnits')
    ret_message: str = _key('returnMessage')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TxCostResponseData':
        return _decode(cls, data)


@dataclass
class VmValueRequest:
    """Read-only smart contract query"""
    address: str
    func_name: str
    caller_addr: str = ''
    call_value: str = ''
    args: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scAddress': self.address,
            'funcName': self.func_name,
            'caller': self.caller_addr,
            'value': self.call_value,
            'args': list(self.args),
        }


class ReturnDataKind(IntFlag):
    AS_BIG_INT = 1
    AS_BIG_INT_STRING = 2
    AS_STRING = 4
    AS_HEX = 8


def _list_of_bytes(raw, key) -> List[bytes]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DecodeError(f"field {key}: expected a list, got {raw!r}")
    return [_to_bytes(item, key) if item is not None else b'' for item in raw]


@dataclass
class VMOutputApi:
    """Output of a VM query"""
    return_data: List[bytes] = field(
        default_factory=list, metadata={'json': 'returnData', 'decode': _list_of_bytes})
    return_code: str = _key('returnCode')
    return_message: str = _key('returnMessage')
    gas_remaining: int = _key('gasRemaining')
    gas_refund: int = _key('gasRefund')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VMOutputApi':
        return _decode(cls, data)

    def get_first_return_data(self, as_type: ReturnDataKind):
        """
        Interpret the first returned value.

        Raises:
            ValueError: no data was returned, or as_type is not a known kind
        """
        if not self.return_data:
            raise ValueError("no return data")

        first = self.return_data[0]
        if as_type == ReturnDataKind.AS_BIG_INT:
            return int.from_bytes(first, 'big')
        if as_type == ReturnDataKind.AS_BIG_INT_STRING:
            return str(int.from_bytes(first, 'big'))
        if as_type == ReturnDataKind.AS_STRING:
            return first.decode('utf-8')
        if as_type == ReturnDataKind.AS_HEX:
            return first.hex()
        raise ValueError("can't interpret return data")


@dataclass
class Transaction:
    """Transaction to be broadcast to the network"""
    nonce: int
    value: str
    receiver: str
    sender: str
    gas_price: int = 0
    gas_limit: int = 0
    data: Optional[bytes] = None
    signature: str = ''
    chain_id: str = ''
    version: int = 0
    options: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Wire representation.

        Key order is fixed and empty optional fields are omitted, so the
        result doubles as the signing payload once the signature is cleared.
        """
        result = {
            'nonce': self.nonce,
            'value': self.value,
            'receiver': self.receiver,
            'sender': self.sender,
        }
        if self.gas_price:
            result['gasPrice'] = self.gas_price
        if self.gas_limit:
            result['gasLimit'] = self.gas_limit
        if self.data:
            result['data'] = base64.b64encode(self.data).decode('ascii')
        if self.signature:
            result['signature'] = self.signature
        result['chainID'] = self.chain_id
        result['version'] = self.version
        if self.options:
            result['options'] = self.options
        return result


@dataclass
class ArgCreateTransaction:
    """Arguments used to build a transaction"""
    nonce: int = 0
    value: str = ''
    rcv_addr: str = ''
    snd_addr: str = ''
    gas_price: int = 0
    gas_limit: int = 0
    data: Optional[bytes] = None
    signature: str = ''
    chain_id: str = ''
    version: int = 0
    options: int = 0
    available_balance: str = ''

    def to_transaction(self) -> Transaction:
        return Transaction(
            nonce=self.nonce,
            value=self.value,
            receiver=self.rcv_addr,
            sender=self.snd_addr,
            gas_price=self.gas_price,
            gas_limit=self.gas_limit,
            data=self.data,
            signature=self.signature,
            chain_id=self.chain_id,
            version=self.version,
            options=self.options,
        )
