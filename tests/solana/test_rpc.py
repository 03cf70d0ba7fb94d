from __future__ import annotations

import base64
from decimal import Decimal
from typing import Any

import httpx
import pytest

from solwallet.core.errors import NetworkError, TransactionError
from solwallet.solana.rpc import BlockhashInfo, SolanaRPCClient, SolanaRPCError, commitment_reached


def make_response(status_code: int, json_data: dict[str, Any]) -> httpx.Response:
    request = httpx.Request("POST", "https://rpc.example.com")
    return httpx.Response(status_code=status_code, json=json_data, request=request)


class ScriptedRPC:
    """Answers JSON-RPC calls from a per-method queue of results."""

    def __init__(self, results: dict[str, list[Any]]) -> None:
        self.results = results
        self.calls: list[tuple[str, list[Any]]] = []

    def __call__(self, _url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG002
        method = json["method"]
        self.calls.append((method, json["params"]))
        queue = self.results[method]
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        return make_response(200, {"jsonrpc": "2.0", "result": result, "id": json["id"]})


def test_get_balance_success() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, {"jsonrpc": "2.0", "result": {"value": 2_500_000_000}, "id": json["id"]})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    balance = client.get_balance("TestPubkey")

    assert balance == Decimal("2.5")


def test_get_balance_http_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(500, {"error": {"message": "fail"}})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(SolanaRPCError):
        client.get_balance("TestPubkey")


def test_get_balance_rpc_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, {"jsonrpc": "2.0", "error": {"message": "bad pubkey"}, "id": 1})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(SolanaRPCError, match="getBalance: bad pubkey"):
        client.get_balance("BadPubkey")


def test_transport_failure_becomes_network_error() -> None:
    def request(url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        raise httpx.ConnectError("connection refused", request=httpx.Request("POST", url))

    client = SolanaRPCClient(endpoint="https://down.example.com", _request=request)

    with pytest.raises(NetworkError) as excinfo:
        client.get_latest_blockhash()
    assert not isinstance(excinfo.value, SolanaRPCError)


def test_get_latest_blockhash_parses_value() -> None:
    rpc = ScriptedRPC(
        {"getLatestBlockhash": [{"context": {"slot": 1}, "value": {"blockhash": "abc", "lastValidBlockHeight": 150}}]}
    )
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=rpc)

    info = client.get_latest_blockhash()

    assert info == BlockhashInfo(blockhash="abc", last_valid_block_height=150)
    assert rpc.calls[0][1] == [{"commitment": "confirmed"}]


def test_send_transaction_encodes_base64() -> None:
    rpc = ScriptedRPC({"sendTransaction": ["5igSig"]})
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=rpc)

    signature = client.send_transaction(b"\x01\x02\x03")

    assert signature == "5igSig"
    encoded, options = rpc.calls[0][1]
    assert base64.b64decode(encoded) == b"\x01\x02\x03"
    assert options["encoding"] == "base64"


def test_confirm_transaction_polls_until_commitment() -> None:
    rpc = ScriptedRPC(
        {
            "getSignatureStatuses": [
                {"value": [None]},
                {"value": [{"confirmationStatus": "processed", "err": None}]},
                {"value": [{"confirmationStatus": "confirmed", "err": None}]},
            ],
            "getBlockHeight": [100],
        }
    )
    sleeps: list[float] = []
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=rpc, _sleep=sleeps.append, _clock=lambda: 0.0)

    client.confirm_transaction("sig", BlockhashInfo("abc", 150), poll_interval=0.25)

    methods = [method for method, _ in rpc.calls]
    assert methods.count("getSignatureStatuses") == 3
    assert sleeps == [0.25, 0.25]


def test_confirm_transaction_reports_on_chain_failure() -> None:
    rpc = ScriptedRPC(
        {"getSignatureStatuses": [{"value": [{"confirmationStatus": "confirmed", "err": {"InstructionError": [0, "Custom"]}}]}]}
    )
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=rpc, _sleep=lambda _s: None)

    with pytest.raises(TransactionError, match="failed"):
        client.confirm_transaction("sig", BlockhashInfo("abc", 150))


def test_confirm_transaction_detects_expired_blockhash() -> None:
    rpc = ScriptedRPC({"getSignatureStatuses": [{"value": [None]}], "getBlockHeight": [151]})
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=rpc, _sleep=lambda _s: None)

    with pytest.raises(TransactionError, match="expired"):
        client.confirm_transaction("sig", BlockhashInfo("abc", 150))


def test_confirm_transaction_times_out() -> None:
    ticks = iter([0.0, 5.0, 11.0])
    rpc = ScriptedRPC({"getSignatureStatuses": [{"value": [None]}], "getBlockHeight": [10]})
    client = SolanaRPCClient(
        endpoint="https://rpc.example.com",
        _request=rpc,
        _sleep=lambda _s: None,
        _clock=lambda: next(ticks),
    )

    with pytest.raises(TransactionError, match="Timed out"):
        client.confirm_transaction("sig", BlockhashInfo("abc", 150), timeout=10.0)


def test_commitment_ordering() -> None:
    assert commitment_reached("finalized", "confirmed") is True
    assert commitment_reached("processed", "confirmed") is False
    assert commitment_reached(None, "processed") is False
