"""/send and /send-many: SOL transfers through the sequential executor."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from solwallet.cli.types import CommandResponse, CommandRouter, SlashCommand
from solwallet.core.executor import BatchResult
from solwallet.core.intents import TransferIntent
from solwallet.core.polling import explorer_url
from solwallet.solana.transactions import transfer_operation

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp

MAX_PREVIEW_ROWS = 20


def _describe_intents(intents: list[TransferIntent], app: CLIApp) -> str:
    validator = app.intent_validator
    lines = []
    for index, intent in enumerate(intents[:MAX_PREVIEW_ROWS], start=1):
        if intent.valid:
            lines.append(f"{index:>3}. {intent.address}  {intent.amount} SOL")
        else:
            lines.append(f"{index:>3}. {intent.address or '<empty>'}  ✗ {intent.error}")
    if len(intents) > MAX_PREVIEW_ROWS:
        lines.append(f"     … {len(intents) - MAX_PREVIEW_ROWS} more row(s)")
    invalid = len(intents) - validator.valid_count(intents)
    lines.append("")
    lines.append(
        f"{validator.valid_count(intents)} valid, {invalid} invalid. "
        f"Total to send: {validator.total_amount(intents)} SOL"
    )
    return "\n".join(lines)


def _render_result(app: CLIApp, result: BatchResult[TransferIntent]) -> str:
    profile = app.registry.selected_network()
    lines = [result.summary()]
    for outcome in result.outcomes:
        if outcome.ok:
            link = explorer_url(outcome.signature or "", profile, base_url=app.config.explorer_base_url)
            lines.append(f"✓ {outcome.item.amount} SOL → {outcome.item.address}\n  {link}")
        else:
            lines.append(f"✗ {outcome.item.amount} SOL → {outcome.item.address}: {outcome.error}")
    return "\n".join(lines)


def _execute(app: CLIApp, intents: list[TransferIntent]) -> CommandResponse:
    keypair = app.wallet_manager.keypair()
    operation = transfer_operation(keypair, **app.operation_options())
    result = app.make_executor().run(intents, operation)
    severity = "info" if result.failed_count == 0 else "warning"
    app.log_event("transfer", f"Transfer batch: {result.summary()}", severity=severity)
    for outcome in result.outcomes:
        if outcome.ok:
            app.log_event("transfer", f"Sent {outcome.item.amount} SOL to {outcome.item.address}: {outcome.signature}")
        else:
            app.log_event("transfer", f"Transfer to {outcome.item.address} failed: {outcome.error}", severity="error")
    app.refresh_balance()
    return CommandResponse.for_batch(result, _render_result(app, result))


def _read_rows(app: CLIApp) -> str:
    app.console.print("Enter one `address,amount` per line; finish with an empty line.")
    rows: list[str] = []
    while True:
        line = app._prompt_text(f"row {len(rows) + 1}")
        if not line.strip():
            return "\n".join(rows)
        rows.append(line)


def register(app: CLIApp, router: CommandRouter) -> None:
    """Register /send and /send-many."""

    def handle_send(app: CLIApp, args: list[str]) -> CommandResponse:
        if len(args) != 2:
            return CommandResponse(messages=[("system", "Usage: /send <address> <amount>")])
        intent = app.intent_validator.parse_line(f"{args[0]},{args[1]}")
        if not intent.valid:
            return CommandResponse(messages=[("error", intent.error or "Invalid transfer.")])
        app.wallet_manager.keypair()
        if not app._confirm(f"Send {intent.amount} SOL to {intent.address} on {app.registry.selected_network().name}?"):
            return CommandResponse(messages=[("system", "Transfer cancelled.")])
        return _execute(app, [intent])

    def handle_send_many(app: CLIApp, args: list[str]) -> CommandResponse:
        if args:
            path = Path(" ".join(args)).expanduser()
            if not path.is_file():
                return CommandResponse(messages=[("error", f"File '{path}' not found.")])
            intents = app.intent_validator.parse_file(path)
        else:
            intents = app.intent_validator.parse(_read_rows(app))
        if not intents:
            return CommandResponse(messages=[("system", "No recipients provided.")])
        valid = app.intent_validator.valid_intents(intents)
        app.console.print(_describe_intents(intents, app))
        if not valid:
            return CommandResponse(messages=[("error", "No valid rows to send.")])
        app.wallet_manager.keypair()
        total = app.intent_validator.total_amount(intents)
        network = app.registry.selected_network().name
        if not app._confirm(f"Send {total} SOL in {len(valid)} transaction(s) on {network}?"):
            return CommandResponse(messages=[("system", "Batch cancelled.")])
        return _execute(app, valid)

    router.register(SlashCommand("send", handle_send, "Send SOL: /send <address> <amount>"))
    router.register(SlashCommand("send-many", handle_send_many, "Send SOL to many recipients: /send-many [file]"))


__all__ = ["register"]
