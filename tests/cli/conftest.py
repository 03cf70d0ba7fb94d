from __future__ import annotations

from collections.abc import Callable
from io import StringIO
from pathlib import Path
from typing import Any

import httpx
import pytest
from rich.console import Console
from solders.hash import Hash

from solwallet.cli.app import CLIApp
from solwallet.core.config import ConfigManager
from solwallet.core.networks import NetworkConfigRegistry
from solwallet.solana import WalletManager


class FakeRPC:
    """In-process JSON-RPC endpoint answering the methods the shell uses."""

    def __init__(self) -> None:
        self.balance_lamports = 2_500_000_000
        self.token_accounts: list[dict[str, Any]] = []
        self.signatures: list[dict[str, Any]] = []
        self.transactions: dict[str, dict[str, Any]] = {}
        self.reject_sends: set[int] = set()
        self.down = False
        self.sends = 0
        self.calls: list[tuple[str, str]] = []

    def __call__(self, url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG002
        request = httpx.Request("POST", url)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        method = json["method"]
        self.calls.append((url, method))
        try:
            body = {"jsonrpc": "2.0", "id": json["id"], "result": self._result(method, json["params"])}
        except LookupError as exc:
            body = {"jsonrpc": "2.0", "id": json["id"], "error": {"code": -32002, "message": str(exc.args[0])}}
        return httpx.Response(200, json=body, request=request)

    def _result(self, method: str, params: list[Any]) -> Any:
        if method == "getBalance":
            return {"context": {"slot": 1}, "value": self.balance_lamports}
        if method == "getLatestBlockhash":
            return {"context": {"slot": 1}, "value": {"blockhash": str(Hash.new_unique()), "lastValidBlockHeight": 1_000}}
        if method == "sendTransaction":
            self.sends += 1
            if self.sends in self.reject_sends:
                raise LookupError("Transaction simulation failed: insufficient funds")
            return f"sig{self.sends}"
        if method == "getSignatureStatuses":
            return {"context": {"slot": 1}, "value": [{"confirmationStatus": "finalized", "err": None}]}
        if method == "getBlockHeight":
            return 10
        if method == "getTokenAccountsByOwner":
            return {"context": {"slot": 1}, "value": self.token_accounts}
        if method == "getMinimumBalanceForRentExemption":
            return 2_039_280
        if method == "getSignaturesForAddress":
            return self.signatures[: params[1]["limit"]]
        if method == "getTransaction":
            return self.transactions.get(params[0])
        raise AssertionError(f"unexpected RPC method {method}")


@pytest.fixture()
def console() -> Console:
    return Console(file=StringIO(), force_terminal=True, color_system=None, width=160)


@pytest.fixture()
def fake_rpc() -> FakeRPC:
    return FakeRPC()


@pytest.fixture()
def make_app(tmp_path: Path, console: Console, fake_rpc: FakeRPC) -> Callable[..., CLIApp]:
    config_dir = tmp_path / "config"

    def _make(**overrides: Any) -> CLIApp:
        options: dict[str, Any] = {
            "console": console,
            "history_path": tmp_path / "history",
            "config_manager": ConfigManager(config_dir=config_dir),
            "registry": NetworkConfigRegistry.from_config_dir(config_dir),
            "wallet_manager": WalletManager(keys_dir=tmp_path / "keys"),
            "rpc_request": fake_rpc,
            "start_polling": False,
        }
        options.update(overrides)
        return CLIApp(**options)

    return _make


@pytest.fixture()
def app(make_app: Callable[..., CLIApp]) -> CLIApp:
    return make_app()


@pytest.fixture()
def wallet_app(app: CLIApp) -> CLIApp:
    app.wallet_manager.create_wallet("test-pass")
    app.restart_balance_polling()
    return app
