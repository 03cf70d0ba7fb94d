from __future__ import annotations

import threading
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from solwallet.core.errors import NetworkError, SolWalletError
from solwallet.core.networks import BUILTIN_NETWORKS, NetworkProfile
from solwallet.core.polling import BalancePoller, HistoryFetcher, classify_transfer, explorer_url, fetch_balance

ME = "11111111111111111111111111111111"
THEM = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"


def transfer_tx(source: str, destination: str, lamports: int) -> dict[str, Any]:
    return {
        "transaction": {
            "message": {
                "instructions": [
                    {"program": "spl-memo", "parsed": "hello"},
                    {
                        "program": "system",
                        "parsed": {
                            "type": "transfer",
                            "info": {"source": source, "destination": destination, "lamports": lamports},
                        },
                    },
                ]
            }
        }
    }


class FailingRPC:
    def get_balance(self, _address: str) -> Decimal:
        raise NetworkError("RPC endpoint unreachable")


class BalanceRPC:
    def __init__(self, balance: Decimal) -> None:
        self.balance = balance

    def get_balance(self, _address: str) -> Decimal:
        return self.balance


def test_fetch_balance_failure_returns_none() -> None:
    assert fetch_balance(FailingRPC(), ME) is None
    assert fetch_balance(BalanceRPC(Decimal("1")), None) is None
    assert fetch_balance(BalanceRPC(Decimal("1.5")), ME) == Decimal("1.5")


def test_classify_transfer_directions() -> None:
    assert classify_transfer(transfer_tx(ME, THEM, 1_500_000_000), ME) == ("outgoing", Decimal("1.5"), THEM)
    assert classify_transfer(transfer_tx(THEM, ME, 1_000), ME) == ("incoming", Decimal("0.000001"), THEM)
    assert classify_transfer(transfer_tx(THEM, THEM, 1_000), ME) == ("other", None, None)
    assert classify_transfer({}, ME) == ("other", None, None)


class HistoryRPC:
    def __init__(self) -> None:
        self.transactions: dict[str, Any] = {
            "sig-out": transfer_tx(ME, THEM, 2_000_000_000),
            "sig-in": transfer_tx(THEM, ME, 500_000_000),
            "sig-missing": None,
            "sig-other": {"transaction": {"message": {"instructions": []}}},
        }

    def get_signatures_for_address(self, _address: str, *, limit: int) -> list[dict[str, Any]]:
        records = [
            {"signature": "sig-out", "blockTime": 1_700_000_000},
            {"signature": "sig-pending", "blockTime": None},
            {"signature": "sig-in", "blockTime": 1_700_000_100},
            {"signature": "sig-missing", "blockTime": 1_700_000_200},
            {"signature": "sig-broken", "blockTime": 1_700_000_300},
            {"signature": "sig-other", "blockTime": 1_700_000_400},
        ]
        return records[:limit]

    def get_parsed_transaction(self, signature: str) -> dict[str, Any] | None:
        if signature == "sig-broken":
            raise SolWalletError("getTransaction: bad signature")
        return self.transactions[signature]


def test_history_skips_unusable_records() -> None:
    fetcher = HistoryFetcher(HistoryRPC)

    entries = fetcher.fetch(ME, limit=10)

    assert [e.signature for e in entries] == ["sig-out", "sig-in", "sig-other"]
    assert [e.kind for e in entries] == ["outgoing", "incoming", "other"]
    assert entries[0].amount == Decimal("2")
    assert entries[0].counterparty == THEM
    assert entries[1].timestamp == datetime(2023, 11, 14, 22, 15, tzinfo=UTC)


def test_history_respects_limit() -> None:
    entries = HistoryFetcher(HistoryRPC).fetch(ME, limit=1)

    assert [e.signature for e in entries] == ["sig-out"]


def test_explorer_url_for_builtin_and_custom() -> None:
    devnet = BUILTIN_NETWORKS[0]
    custom = NetworkProfile(id="http://localhost:8899", name="Local", endpoint="http://localhost:8899", is_custom=True)

    assert explorer_url("abc", devnet) == "https://explorer.solana.com/tx/abc?cluster=devnet"
    assert explorer_url("abc", custom) == (
        "https://explorer.solana.com/tx/abc?cluster=custom&customUrl=http%3A%2F%2Flocalhost%3A8899"
    )
    assert explorer_url("abc", devnet, base_url="https://solscan.example/").startswith("https://solscan.example/tx/")


def test_balance_poller_delivers_updates_until_cancelled() -> None:
    updates: list[Decimal | None] = []
    received = threading.Event()

    def on_update(balance: Decimal | None) -> None:
        updates.append(balance)
        received.set()

    poller = BalancePoller(lambda: BalanceRPC(Decimal("3")), interval=60.0)
    handle = poller.start(ME, on_update)

    assert received.wait(5.0)
    handle.cancel(wait=True, timeout=5.0)

    assert updates == [Decimal("3")]
    assert handle.active is False


def test_balance_poller_survives_callback_errors() -> None:
    calls: list[Decimal | None] = []
    second = threading.Event()

    def on_update(balance: Decimal | None) -> None:
        calls.append(balance)
        if len(calls) >= 2:
            second.set()
            return
        raise ValueError("render failed")

    poller = BalancePoller(FailingRPC, interval=0.05)
    handle = poller.start(ME, on_update)

    assert second.wait(5.0)
    handle.cancel(wait=True, timeout=5.0)

    assert calls[:2] == [None, None]
