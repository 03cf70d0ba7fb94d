"""Builtin CLI command registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solwallet.cli.commands import close, history, logs, network, send, wallet
from solwallet.cli.commands import help as help_cmd
from solwallet.cli.commands import quit as quit_cmd
from solwallet.cli.types import CommandRouter

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp


def register_builtin_commands(app: CLIApp, router: CommandRouter) -> None:
    """Attach all builtin slash commands to the router."""

    help_cmd.register(app, router)
    quit_cmd.register(app, router)
    logs.register(app, router)
    network.register(app, router)
    wallet.register(app, router)
    history.register(app, router)
    send.register(app, router)
    close.register(app, router)


__all__ = ["register_builtin_commands"]
