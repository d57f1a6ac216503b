"""
EgldClient tests against a fake HTTP session
"""
import base64
import json

import pytest
import requests

from egld_sdk.address import Address
from egld_sdk.client import EgldClient, ProxyArgs, order_sent_hashes
from egld_sdk.endpoints import RestAPIEntityType
from egld_sdk.exceptions import (
    DecodeError,
    HttpStatusError,
    InvalidAddressError,
    InvalidAllowedDeltaError,
    InvalidCacheDurationError,
    NilAddressError,
    NilNetworkConfigsError,
    NilNetworkStatusError,
    RemoteError,
    RequestTimeoutError,
    ShardIdMismatchError,
    ShardSyncingError,
    UnknownEntityTypeError,
)
from egld_sdk.models import NetworkConfig, ReturnDataKind, Transaction, VmValueRequest
from egld_sdk.sharding import METACHAIN_SHARD_ID
from tests.fakes import ALICE, BOB, NETWORK_CONFIG, BASE_URL, FakeResponse, FakeSession, envelope

ACCOUNT = {
    "address": ALICE,
    "nonce": 7,
    "balance": "1500000000000000000",
    "code": "",
    "username": "alice",
}


def _client(session, **kwargs):
    return EgldClient(ProxyArgs(BASE_URL, session=session, **kwargs))


def _session_with_config():
    session = FakeSession()
    session.route("GET", "network/config", envelope({"config": NETWORK_CONFIG}))
    return session


def _transaction(nonce=1):
    return Transaction(nonce=nonce, value="10", receiver=BOB, sender=ALICE,
                       gas_price=1000000000, gas_limit=50000, signature="ab" * 64,
                       chain_id="T", version=1)


# Construction

def test_finality_check_requires_positive_delta():
    with pytest.raises(InvalidAllowedDeltaError):
        _client(FakeSession(), finality_check=True, allowed_delta_to_final=0)


def test_delta_is_ignored_without_finality_check():
    _client(FakeSession(), finality_check=False, allowed_delta_to_final=0)


def test_cache_expiration_below_minimum_is_rejected():
    with pytest.raises(InvalidCacheDurationError):
        _client(FakeSession(), cache_expiration=0.5)


def test_unknown_entity_type_is_rejected():
    with pytest.raises(UnknownEntityTypeError):
        _client(FakeSession(), entity_type="Gateway")


def test_client_closes_its_session():
    session = FakeSession()
    with _client(session) as client:
        assert client.get_rest_api_entity_type() == RestAPIEntityType.PROXY
    assert session.closed


# Response pipeline

def test_network_config_is_decoded_and_cached():
    session = _session_with_config()
    client = _client(session)

    config = client.get_network_config()
    assert config.chain_id == "T"
    assert config.num_shards_without_meta == 3
    assert config.min_gas_price == 1000000000
    assert config.adaptivity is False
    assert config.hysteresis == pytest.approx(0.2)

    assert client.get_network_config() is config
    assert session.count("GET", "network/config") == 1


def test_remote_error_is_raised_with_code():
    session = FakeSession()
    session.route("GET", "network/config", envelope(error="bad things", code="internal_issue"))

    with pytest.raises(RemoteError) as excinfo:
        _client(session).get_network_config()
    assert str(excinfo.value) == "bad things"
    assert excinfo.value.code == "internal_issue"


def test_non_200_status_raises_with_returned_error():
    session = FakeSession()
    session.route("GET", "network/config", envelope(error="unavailable", status=500))

    with pytest.raises(HttpStatusError) as excinfo:
        _client(session).get_network_config()
    assert excinfo.value.status_code == 500
    assert "unavailable" in str(excinfo.value)
    assert not excinfo.value.is_client_error


def test_missing_route_is_a_client_error():
    with pytest.raises(HttpStatusError) as excinfo:
        _client(FakeSession()).get_network_config()
    assert excinfo.value.status_code == 404
    assert excinfo.value.is_client_error


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'{"data": {}}'])
def test_malformed_body_raises_decode_error(body):
    session = FakeSession()
    session.route("GET", "network/config", FakeResponse(body))
    with pytest.raises(DecodeError):
        _client(session).get_network_config()


def test_wrong_field_type_raises_decode_error():
    session = FakeSession()
    config = dict(NETWORK_CONFIG, erd_num_shards_without_meta="three")
    session.route("GET", "network/config", envelope({"config": config}))
    with pytest.raises(DecodeError):
        _client(session).get_network_config()


# Shards and status

def test_shard_of_address_uses_network_shard_count():
    client = _client(_session_with_config())
    assert client.get_shard_of_address(ALICE) == 1
    assert client.get_shard_of_address(BOB) == 0


def test_shard_of_invalid_address_is_rejected():
    with pytest.raises(InvalidAddressError):
        _client(_session_with_config()).get_shard_of_address("erd1nope")


def test_proxy_network_status():
    session = FakeSession()
    session.route("GET", "network/status/1", envelope({"status": {"erd_nonce": 42, "erd_shard_id": 1}}))
    session.route("GET", f"network/status/{METACHAIN_SHARD_ID}",
                  envelope({"status": {"erd_nonce": 99, "erd_shard_id": METACHAIN_SHARD_ID}}))
    client = _client(session)

    assert client.get_network_status(1).nonce == 42
    assert client.get_latest_hyper_block_nonce() == 99


def test_proxy_does_not_check_reported_shard():
    session = FakeSession()
    session.route("GET", "network/status/1", envelope({"status": {"erd_nonce": 42, "erd_shard_id": 0}}))
    assert _client(session).get_network_status(1).nonce == 42


def test_observer_status_reads_metrics():
    session = FakeSession()
    session.route("GET", "node/status", envelope({"metrics": {"erd_nonce": 5, "erd_shard_id": 2,
                                                              "erd_nonce_at_epoch_start": 3}}))
    client = _client(session, entity_type=RestAPIEntityType.OBSERVER_NODE)

    assert client.get_network_status(2).nonce == 5
    assert client.get_nonce_at_epoch_start(2) == 3


def test_observer_from_other_shard_is_rejected():
    session = FakeSession()
    session.route("GET", "node/status", envelope({"metrics": {"erd_nonce": 5, "erd_shard_id": 0}}))
    client = _client(session, entity_type=RestAPIEntityType.OBSERVER_NODE)

    with pytest.raises(ShardIdMismatchError) as excinfo:
        client.get_network_status(2)
    assert excinfo.value.requested == 2
    assert excinfo.value.received == 0


def test_missing_status_is_rejected():
    session = FakeSession()
    session.route("GET", "network/status/1", envelope({"other": {}}))
    with pytest.raises(NilNetworkStatusError):
        _client(session).get_network_status(1)


# Accounts

def test_get_account():
    session = FakeSession()
    session.route("GET", f"address/{ALICE}", envelope({"account": ACCOUNT}))

    account = _client(session).get_account(Address.from_bech32(ALICE))
    assert account.nonce == 7
    assert account.balance == "1500000000000000000"
    assert account.get_balance(18) == pytest.approx(1.5)
    assert account.code_hash == b""


def test_get_account_rejects_bad_addresses():
    client = _client(FakeSession())
    with pytest.raises(NilAddressError):
        client.get_account(None)
    with pytest.raises(InvalidAddressError):
        client.get_account(Address(b"\x01" * 5))


def test_get_account_checks_finality_first():
    session = _session_with_config()
    session.route("GET", "node/status", envelope({"metrics": {
        "erd_nonce": 100, "erd_highest_final_nonce": 99, "erd_probable_highest_nonce": 100, "erd_shard_id": 1}}))
    session.route("GET", f"address/{ALICE}", envelope({"account": ACCOUNT}))
    client = _client(session, entity_type=RestAPIEntityType.OBSERVER_NODE, finality_check=True)

    assert client.get_account(Address.from_bech32(ALICE)).nonce == 7
    assert session.count("GET", "node/status") == 1


def test_get_account_refused_while_shard_syncing():
    session = _session_with_config()
    session.route("GET", "node/status", envelope({"metrics": {
        "erd_nonce": 90, "erd_highest_final_nonce": 99, "erd_probable_highest_nonce": 100, "erd_shard_id": 1}}))
    session.route("GET", f"address/{ALICE}", envelope({"account": ACCOUNT}))
    client = _client(session, entity_type=RestAPIEntityType.OBSERVER_NODE, finality_check=True)

    with pytest.raises(ShardSyncingError):
        client.get_account(Address.from_bech32(ALICE))
    assert session.count("GET", f"address/{ALICE}") == 0


def test_default_transaction_arguments():
    client = _client(FakeSession())
    config = NetworkConfig.from_dict(NETWORK_CONFIG)

    args = client.get_default_transaction_arguments(Address.from_bech32(ALICE), config)
    assert args.snd_addr == ALICE
    assert args.gas_price == 1000000000
    assert args.gas_limit == 50000
    assert args.chain_id == "T"
    assert args.version == 1
    assert args.nonce == 0
    assert args.value == ""


def test_default_transaction_arguments_require_inputs():
    client = _client(FakeSession())
    with pytest.raises(NilNetworkConfigsError):
        client.get_default_transaction_arguments(Address.from_bech32(ALICE), None)
    with pytest.raises(NilAddressError):
        client.get_default_transaction_arguments(None, NetworkConfig.from_dict(NETWORK_CONFIG))


# Transactions

def test_send_transaction_posts_wire_format():
    session = FakeSession()
    session.route("POST", "transaction/send", envelope({"txHash": "f00d"}))

    assert _client(session).send_transaction(_transaction()) == "f00d"
    body = json.loads(session.requests[0]["data"])
    assert body["sender"] == ALICE
    assert body["gasPrice"] == 1000000000
    assert body["chainID"] == "T"


def test_send_transactions_orders_hashes_by_index():
    session = FakeSession()
    session.route("POST", "transaction/send-multiple", envelope({
        "numOfSentTxs": 3,
        "txsHashes": {"2": "hashC", "0": "hashA", "1": "hashB"},
    }))

    hashes = _client(session).send_transactions([_transaction(n) for n in range(3)])
    assert hashes == ["hashA", "hashB", "hashC"]
    body = json.loads(session.requests[0]["data"])
    assert [tx["nonce"] for tx in body] == [0, 1, 2]


def test_order_sent_hashes_handles_multi_digit_indexes():
    hashes = {str(i): f"h{i}" for i in range(12)}
    assert order_sent_hashes(hashes) == [f"h{i}" for i in range(12)]


def test_order_sent_hashes_rejects_non_numeric_index():
    with pytest.raises(DecodeError):
        order_sent_hashes({"first": "h"})


def test_transaction_status():
    session = FakeSession()
    session.route("GET", "transaction/aa/status", envelope({"status": "success"}))
    assert _client(session).get_transaction_status("aa") == "success"


def test_transaction_info_with_results():
    session = FakeSession()
    session.route("GET", "transaction/aa?withResults=true", envelope({"transaction": {
        "hash": "aa",
        "nonce": 3,
        "data": base64.b64encode(b"memo").decode(),
        "status": "success",
        "smartContractResults": [{"hash": "bb", "value": 0, "returnMessage": "ok"}],
    }}))

    tx = _client(session).get_transaction_info_with_results("aa")
    assert tx.nonce == 3
    assert tx.data == b"memo"
    assert tx.smart_contract_results[0].return_message == "ok"


def test_transaction_info_without_results():
    session = FakeSession()
    session.route("GET", "transaction/aa", envelope({"transaction": {"hash": "aa", "status": "pending"}}))

    tx = _client(session).get_transaction_info("aa")
    assert tx.status == "pending"
    assert tx.smart_contract_results == []


def test_request_transaction_cost():
    session = FakeSession()
    session.route("POST", "transaction/cost", envelope({"txGasUnits": 57500, "returnMessage": ""}))
    assert _client(session).request_transaction_cost(_transaction()).tx_cost == 57500


# Smart contracts

def test_vm_query_sends_state_flags():
    session = FakeSession()
    session.route("POST", "vm-values/query", envelope({"data": {
        "returnData": [base64.b64encode((1000).to_bytes(2, "big")).decode()],
        "returnCode": "ok",
    }}))
    client = _client(session, same_sc_state=True, should_be_synced=True)

    output = client.execute_vm_query(VmValueRequest(address=BOB, func_name="getSum", args=["01"]))
    body = json.loads(session.requests[0]["data"])
    assert body["scAddress"] == BOB
    assert body["funcName"] == "getSum"
    assert body["args"] == ["01"]
    assert body["sameScState"] is True
    assert body["shouldBeSynced"] is True
    assert output.return_code == "ok"
    assert output.get_first_return_data(ReturnDataKind.AS_BIG_INT) == 1000
    assert output.get_first_return_data(ReturnDataKind.AS_HEX) == "03e8"


# Blocks

def test_hyper_block_by_nonce():
    session = FakeSession()
    session.route("GET", "hyperblock/by-nonce/10", envelope({"hyperblock": {
        "nonce": 10,
        "hash": "cafe",
        "shardBlocks": [{"hash": "s0", "nonce": 20, "shard": 0}],
        "transactions": [{"hash": "t0"}],
    }}))

    block = _client(session).get_hyper_block_by_nonce(10)
    assert block.hash == "cafe"
    assert block.shard_blocks[0].nonce == 20
    assert block.transactions[0].hash == "t0"


def test_raw_blocks_are_base64_decoded():
    session = FakeSession()
    raw = base64.b64encode(b"\x0a\x0b").decode()
    session.route("GET", "internal/1/raw/block/by-nonce/9", envelope({"block": raw}))
    session.route("GET", "internal/1/raw/miniblock/by-hash/dd/epoch/3", envelope({"miniblock": raw}))
    session.route("GET", "internal/raw/startofepoch/metablock/by-epoch/4", envelope({"block": raw}))
    client = _client(session)

    assert client.get_raw_block_by_nonce(1, 9) == b"\x0a\x0b"
    assert client.get_raw_mini_block_by_hash(1, "dd", 3) == b"\x0a\x0b"
    assert client.get_raw_start_of_epoch_meta_block(4) == b"\x0a\x0b"


def test_raw_block_with_bad_base64_raises_decode_error():
    session = FakeSession()
    session.route("GET", "internal/1/raw/block/by-hash/cc", envelope({"block": "***"}))
    with pytest.raises(DecodeError):
        _client(session).get_raw_block_by_hash(1, "cc")


# Deadlines

def test_per_call_timeout_reaches_every_request():
    session = _session_with_config()
    session.route("GET", "node/status", envelope({"metrics": {
        "erd_nonce": 100, "erd_highest_final_nonce": 99, "erd_probable_highest_nonce": 100, "erd_shard_id": 1}}))
    session.route("GET", f"address/{ALICE}", envelope({"account": ACCOUNT}))
    client = _client(session, entity_type=RestAPIEntityType.OBSERVER_NODE, finality_check=True, timeout=30)

    client.get_account(Address.from_bech32(ALICE), timeout=3)
    assert [r["url"] for r in session.requests] == [
        f"{BASE_URL}/network/config",
        f"{BASE_URL}/node/status",
        f"{BASE_URL}/address/{ALICE}",
    ]
    assert {r["timeout"] for r in session.requests} == {3}


def test_client_timeout_is_the_default_deadline():
    session = FakeSession()
    session.route("GET", "transaction/aa/status", envelope({"status": "success"}))
    client = _client(session, timeout=12)

    client.get_transaction_status("aa")
    client.get_transaction_status("aa", timeout=1.5)
    assert [r["timeout"] for r in session.requests] == [12, 1.5]


def test_expired_deadline_raises_timeout_error():
    session = FakeSession()
    session.route("POST", "transaction/send", requests.ReadTimeout("read timed out"))

    with pytest.raises(RequestTimeoutError):
        _client(session).send_transaction(_transaction(), timeout=0.1)
