"""/help: list slash commands, or show usage for one of them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solwallet.cli.types import CommandResponse, CommandRouter, SlashCommand

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp


def register(app: CLIApp, router: CommandRouter) -> None:
    """Register the /help command."""

    def handle(_app: CLIApp, args: list[str]) -> CommandResponse:
        commands = {c.name: c for c in router.available_commands() if not c.name.startswith("_")}
        if args:
            name = args[0].lstrip("/")
            command = commands.get(name)
            if command is None:
                return CommandResponse(messages=[("system", f"No command named '/{name}'.")])
            return CommandResponse(messages=[("system", f"/{command.name}  {command.help_text}")])
        width = max((len(name) for name in commands), default=0) + 1
        lines = ["Available commands:"]
        for name in sorted(commands):
            lines.append(f"  /{name:<{width}} {commands[name].help_text}")
        lines.append("")
        lines.append("Most commands print their subcommands when called with `help`.")
        return CommandResponse(messages=[("system", "\n".join(lines))])

    router.register(SlashCommand("help", handle, "Show available commands"))


__all__ = ["register"]
