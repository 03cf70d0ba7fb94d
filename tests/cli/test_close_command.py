from __future__ import annotations

from typing import Any

import pytest

from solwallet.cli.app import CLIApp

EMPTY = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
FUNDED = "So11111111111111111111111111111111111111112"


def token_account(pubkey: str, amount: str) -> dict[str, Any]:
    return {
        "pubkey": pubkey,
        "account": {
            "lamports": 2_039_280,
            "data": {
                "program": "spl-token",
                "space": 165,
                "parsed": {
                    "type": "account",
                    "info": {
                        "mint": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
                        "tokenAmount": {"amount": amount, "decimals": 6},
                    },
                },
            },
        },
    }


@pytest.fixture()
def scanned_app(wallet_app: CLIApp, fake_rpc) -> CLIApp:  # noqa: ANN001
    fake_rpc.token_accounts = [token_account(EMPTY, "0"), token_account(FUNDED, "5000000")]
    wallet_app.handle_line("/close scan")
    return wallet_app


def test_list_before_scan(app: CLIApp) -> None:
    assert app.handle_line("/close").messages == [("system", "No token accounts found. Run `/close scan` first.")]


def test_scan_preselects_empty_accounts(scanned_app: CLIApp) -> None:
    output = scanned_app.handle_line("/close list").messages[0][1]

    assert f"[x]  {EMPTY}" in output
    assert f"[ ]  {FUNDED}" in output
    assert "1 selected; rent to reclaim: 0.00203928 SOL" in output
    assert scanned_app.log_buffer.recent(category="accounts")[-1].message.startswith("Scanned 2")


def test_toggle_by_index_and_address(scanned_app: CLIApp) -> None:
    output = scanned_app.handle_line("/close toggle 2").messages[0][1]
    assert "2 selected; rent to reclaim: 0.00407856 SOL" in output

    output = scanned_app.handle_line(f"/close toggle {EMPTY}").messages[0][1]
    assert "1 selected" in output

    assert scanned_app.handle_line("/close toggle 7").messages[0][0] == "error"


def test_run_closes_selected_and_reports_reclaimed_rent(
    scanned_app: CLIApp, monkeypatch: pytest.MonkeyPatch, fake_rpc  # noqa: ANN001
) -> None:
    prompts: list[str] = []

    def confirm(message: str) -> bool:
        prompts.append(message)
        return True

    monkeypatch.setattr(scanned_app, "_confirm", confirm)

    response = scanned_app.handle_line("/close run")

    assert response.messages == [("success", "1 succeeded, 0 failed of 1. Reclaimed 0.00203928 SOL.")]
    assert fake_rpc.sends == 1
    assert prompts and "1 account(s)" in prompts[0]
    assert [c.account_id for c in scanned_app.account_selector.candidates] == [FUNDED]


def test_run_declined_closes_nothing(scanned_app: CLIApp, monkeypatch: pytest.MonkeyPatch, fake_rpc) -> None:  # noqa: ANN001
    monkeypatch.setattr(scanned_app, "_confirm", lambda _message: False)

    response = scanned_app.handle_line("/close run")

    assert response.messages == [("system", "Nothing closed.")]
    assert fake_rpc.sends == 0


def test_run_with_nothing_selected(scanned_app: CLIApp) -> None:
    scanned_app.handle_line("/close toggle 1")

    assert scanned_app.handle_line("/close run").messages == [("system", "No accounts selected.")]


def test_empty_reselects_zero_balance_accounts(scanned_app: CLIApp) -> None:
    scanned_app.handle_line("/close toggle 1")

    output = scanned_app.handle_line("/close empty").messages[0][1]

    assert "1 selected" in output
