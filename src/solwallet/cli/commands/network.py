"""/network: list, select and manage RPC endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from solwallet.cli.types import CommandResponse, CommandRouter, SlashCommand
from solwallet.core.errors import PreconditionError, ValidationError
from solwallet.core.networks import NetworkProfile

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.cli.app import CLIApp

USAGE = "\n".join(
    [
        "Usage: /network <subcommand>",
        "",
        "Subcommands:",
        "  list                    Show built-in and custom networks.",
        "  select <id|name|#>      Switch the active network.",
        "  add <name> <url>        Add a custom RPC endpoint.",
        "  edit <name>             Rename or repoint a custom RPC (prompts).",
        "  delete <name>           Remove a custom RPC.",
    ]
)


def _render_list(app: CLIApp) -> str:
    selected = app.registry.selected_network()
    lines = ["#  network          endpoint"]
    for index, profile in enumerate(app.registry.list_networks(), start=1):
        marker = "*" if profile.id == selected.id else " "
        kind = " (custom)" if profile.is_custom else ""
        lines.append(f"{index:<2}{marker}{profile.name:<16} {profile.endpoint}{kind}")
    return "\n".join(lines)


def _resolve(app: CLIApp, token: str) -> NetworkProfile | None:
    profiles = app.registry.list_networks()
    if token.isdigit() and 1 <= int(token) <= len(profiles):
        return profiles[int(token) - 1]
    lowered = token.lower()
    for profile in profiles:
        if profile.id == token or profile.name.lower() == lowered:
            return profile
    return None


def _after_switch(app: CLIApp) -> None:
    app.persist_network_selection()
    app.restart_balance_polling()


def register(app: CLIApp, router: CommandRouter) -> None:
    """Register the /network command."""

    def handle(app: CLIApp, args: list[str]) -> CommandResponse:
        registry = app.registry
        command = args[0].lower() if args else "list"
        rest = args[1:]

        if command == "list":
            return CommandResponse(messages=[("system", _render_list(app))])

        if command == "help":
            return CommandResponse(messages=[("system", USAGE)])

        if command == "select":
            if not rest:
                return CommandResponse(messages=[("system", "Usage: /network select <id|name|#>")])
            target = _resolve(app, " ".join(rest))
            if target is None:
                return CommandResponse(messages=[("error", f"Unknown network '{' '.join(rest)}'.")])
            try:
                profile = registry.select_network(target.id)
            except PreconditionError as exc:
                return CommandResponse(messages=[("error", str(exc))])
            _after_switch(app)
            app.log_event("network", f"Switched to {profile.name} ({profile.endpoint})")
            return CommandResponse(messages=[("success", f"Active network: {profile.name} ({profile.endpoint})")])

        if command == "add":
            if len(rest) >= 2:
                name, url = " ".join(rest[:-1]), rest[-1]
            else:
                name = rest[0] if rest else app._prompt_text("RPC name")
                url = app._prompt_text("RPC URL")
            try:
                profile = registry.add_custom_rpc(name, url)
            except ValidationError as exc:
                app.log_event("network", f"Add RPC rejected: {exc}", severity="warning")
                return CommandResponse(messages=[("error", str(exc))])
            app.log_event("network", f"Added custom RPC {profile.name}")
            return CommandResponse(
                messages=[("success", f"Added {profile.name} ({profile.endpoint}). Use `/network select {profile.name}` to switch.")]
            )

        if command == "edit":
            if not rest:
                return CommandResponse(messages=[("system", "Usage: /network edit <name>")])
            original = " ".join(rest)
            current = next((p for p in registry.list_networks() if p.is_custom and p.name == original), None)
            if current is None:
                return CommandResponse(messages=[("error", f"No custom RPC named '{original}'.")])
            new_name = app._prompt_text(f"New name [{current.name}]").strip() or current.name
            new_url = app._prompt_text(f"New URL [{current.endpoint}]").strip() or current.endpoint
            was_selected = registry.selected_network().id == current.id
            try:
                profile = registry.update_custom_rpc(original, new_name, new_url)
            except (ValidationError, PreconditionError) as exc:
                return CommandResponse(messages=[("error", str(exc))])
            if was_selected:
                _after_switch(app)
            app.log_event("network", f"Updated custom RPC {original} -> {profile.name}")
            return CommandResponse(messages=[("success", f"Updated {profile.name} ({profile.endpoint}).")])

        if command == "delete":
            if not rest:
                return CommandResponse(messages=[("system", "Usage: /network delete <name>")])
            name = " ".join(rest)
            if not app._confirm(f"Delete custom RPC '{name}'?"):
                return CommandResponse(messages=[("system", "Delete cancelled.")])
            was_selected = registry.selected_network().name == name
            try:
                registry.delete_custom_rpc(name)
            except (ValidationError, PreconditionError) as exc:
                return CommandResponse(messages=[("error", str(exc))])
            message = f"Deleted custom RPC '{name}'."
            if was_selected:
                _after_switch(app)
                message += f" Active network reset to {registry.selected_network().name}."
            app.log_event("network", message)
            return CommandResponse(messages=[("success", message)])

        return CommandResponse(messages=[("system", f"Unknown subcommand '{command}'.\n{USAGE}")])

    router.register(SlashCommand("network", handle, "List, switch and manage RPC endpoints"))


__all__ = ["register"]
