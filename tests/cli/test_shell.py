from __future__ import annotations

from solwallet.cli.app import CLIApp
from solwallet.cli.types import CommandResponse
from solwallet.core.executor import BatchResult


def text_of(response) -> str:  # noqa: ANN001
    return "\n".join(message for _role, message in response.messages)


def test_help_lists_wallet_commands(app: CLIApp) -> None:
    response = app.handle_line("/help")

    output = text_of(response)
    for name in ("/balance", "/close", "/history", "/logs", "/network", "/send", "/send-many", "/wallet", "/quit"):
        assert name in output
    assert "Show available commands" in text_of(app.handle_line("/help help"))


def test_plain_text_is_not_a_command(app: CLIApp) -> None:
    response = app.handle_line("send 1 SOL please")

    assert response.messages == [("system", "Commands start with '/'. Type /help for a list of commands.")]
    assert app.handle_line("   ").messages == []


def test_unknown_command(app: CLIApp) -> None:
    response = app.handle_line("/airdrop")

    assert "Unknown command '/airdrop'" in text_of(response)
    assert response.continue_loop is True


def test_quit_command_exits(app: CLIApp) -> None:
    response = app.handle_line("/quit")

    assert response.continue_loop is False
    assert "Bye" in text_of(response)
    assert app.handle_line("/exit").continue_loop is False


def test_service_errors_become_error_messages(app: CLIApp) -> None:
    response = app.handle_line("/close scan")

    assert response.messages == [("error", "Connect or unlock a wallet before scanning accounts.")]
    latest = app.log_buffer.latest()
    assert latest is not None
    assert latest.category == "system" and latest.severity == "error"


def test_startup_events_are_logged(app: CLIApp) -> None:
    categories = [entry.category for entry in app.log_buffer.recent()]

    assert categories[:2] == ["network", "wallet"]
    assert app.log_buffer.recent(category="wallet")[0].severity == "warning"


def test_logs_command_filters_and_redacts(app: CLIApp) -> None:
    app.log_event("transfer", "Sent 1 SOL to VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK")

    output = text_of(app.handle_line("/logs transfer"))

    assert "VkgX…y2GK" in output
    assert "VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK" not in output
    assert "Using Devnet" not in output
    assert "Unknown log category 'deploy'" in text_of(app.handle_line("/logs deploy"))
    assert "No 'accounts' log entries recorded yet." in text_of(app.handle_line("/logs accounts"))


def test_status_bar_without_wallet(app: CLIApp) -> None:
    plain = app.status_bar.render_plain()

    assert plain.startswith("Network: Devnet | Wallet: missing wallet ⚠️ | Balance: --")
    assert "Last Log: wallet/WARNING" in plain


def test_status_bar_with_unlocked_wallet(wallet_app: CLIApp) -> None:
    wallet_app.refresh_balance()

    snapshot = wallet_app.status_bar.snapshot()

    assert snapshot.balance == "2.5000 SOL"
    assert snapshot.wallet.startswith("connected (")
    wallet_app.wallet_manager.lock_wallet()
    assert wallet_app.status_bar.snapshot().wallet.startswith("locked (")


def test_rpc_client_follows_active_network(app: CLIApp) -> None:
    app.registry.select_network("testnet")

    client = app.rpc_client()

    assert client.endpoint == "https://api.testnet.solana.com"
    assert client.commitment == app.config.commitment
    assert client.timeout == app.config.rpc_timeout


def test_batch_response_role_follows_outcome() -> None:
    clean = BatchResult(total_count=2, success_count=2)
    partial = BatchResult(total_count=2, success_count=1, failed_count=1)
    cancelled = BatchResult(total_count=2, success_count=1, cancelled=True)

    assert CommandResponse.for_batch(clean, "done").messages == [("success", "done")]
    assert CommandResponse.for_batch(partial, "done").roles == ["warning"]
    assert CommandResponse.for_batch(cancelled, "done").roles == ["warning"]
