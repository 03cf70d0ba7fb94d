"""Interactive CLI shell for SolWallet."""

from __future__ import annotations

import logging
import os
import sys
from decimal import Decimal
from io import StringIO
from pathlib import Path
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from solwallet.cli.branding import SOLWALLET_THEME, create_message_panel, render_banner, themed_console
from solwallet.cli.commands import register_builtin_commands
from solwallet.cli.status_bar import StatusBar
from solwallet.cli.types import CommandResponse, CommandRouter
from solwallet.cli.wallet_prompts import prompt_confirm, prompt_secret, prompt_text
from solwallet.core import (
    DEFAULT_CONFIG_DIR,
    AccountCloseSelector,
    BalancePoller,
    BatchProgress,
    ConfigManager,
    HistoryFetcher,
    IntentValidator,
    NetworkConfigRegistry,
    PollHandle,
    SequentialTransactionExecutor,
    WalletConfig,
)
from solwallet.core.errors import SolWalletError
from solwallet.core.logs import LogBuffer, LogEntry
from solwallet.solana import SolanaRPCClient, WalletManager

logger = logging.getLogger(__name__)


DEFAULT_HISTORY_PATH = DEFAULT_CONFIG_DIR / "history"


class _ConsoleProxy:
    """Proxy that routes print() through CLIApp-aware renderer while delegating everything else."""

    def __init__(self, app: CLIApp, console: Console) -> None:
        self._app = app
        self._console = console

    def print(self, *objects: Any, **kwargs: Any) -> None:
        self._app._print_rich(*objects, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._console, name)


class CLIApp:
    """Interactive shell wiring the wallet services to slash commands."""

    def __init__(
        self,
        console: Console | None = None,
        history_path: Path | None = None,
        config: WalletConfig | None = None,
        config_manager: ConfigManager | None = None,
        registry: NetworkConfigRegistry | None = None,
        wallet_manager: WalletManager | None = None,
        rpc_request: Any = None,
        start_polling: bool = True,
    ) -> None:
        base_console = console or CLIApp._default_console()
        if console is not None and not getattr(base_console, "_solwallet_theme_applied", False):
            base_console.push_theme(SOLWALLET_THEME)
            base_console._solwallet_theme_applied = True
        self._console = base_console
        self.console = _ConsoleProxy(self, base_console)
        self._color_enabled = bool(self._console.is_terminal and not getattr(self._console, "no_color", False))
        self.config_manager = config_manager
        if config is None:
            config = config_manager.load() if config_manager is not None else WalletConfig()
        self.config = config
        self.registry = registry or NetworkConfigRegistry(selected_id=config.network)
        self.wallet_manager = wallet_manager or WalletManager()
        self._rpc_request = rpc_request
        self.log_buffer = LogBuffer()
        self.intent_validator = IntentValidator()
        self.account_selector = AccountCloseSelector(self.rpc_client)
        self.history_fetcher = HistoryFetcher(self.rpc_client)
        self.balance_poller = BalancePoller(self.rpc_client, interval=config.balance_poll_interval_secs)
        self.balance: Decimal | None = None
        self._poll_handle: PollHandle | None = None
        self._polling_enabled = start_polling
        self.command_router = CommandRouter()
        self.status_bar = StatusBar(
            console=self._console,
            registry=self.registry,
            wallet_manager=self.wallet_manager,
            balance_resolver=lambda: self.balance,
            log_buffer=self.log_buffer,
        )
        history_path = history_path or DEFAULT_HISTORY_PATH
        history_path.parent.mkdir(parents=True, exist_ok=True)
        self.session = PromptSession(
            history=FileHistory(str(history_path)),
            bottom_toolbar=self.status_bar.toolbar if self.status_bar.supports_toolbar else None,
        )
        self.log_buffer.subscribe(lambda _entry: self._refresh_status_bar())
        register_builtin_commands(self, self.command_router)
        self._awaiting_ctrl_c_confirm = False

        profile = self.registry.selected_network()
        self.log_event("network", f"Using {profile.name} ({profile.endpoint})")
        status = self.wallet_manager.status()
        if status.exists:
            self.log_event("wallet", f"Wallet detected {status.masked_address}")
        else:
            self.log_event("wallet", "No wallet configured", severity="warning")
        self.restart_balance_polling()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run(self) -> None:
        """Start the interactive REPL."""
        self._render_banner()
        status = self.wallet_manager.status()
        lines = [
            "[#14F195]Manage your Solana wallet from the terminal[/]",
            "[#94A3B8]Send SOL, batch transfers, reclaim rent from empty token accounts.[/]",
            "",
            f"[#38BDF8]Network[/]: {self.registry.selected_network().name}",
        ]
        if not status.exists:
            lines.append("[#F472B6]No wallet yet. Use `/wallet create` or `/wallet restore`.[/]")
        elif status.is_unlocked:
            lines.append(f"[#14F195]🔓 Wallet {status.masked_address} unlocked.[/]")
        else:
            lines.append(f"[#F472B6]🔒 Wallet {status.masked_address} locked. Use `/wallet unlock` to sign.[/]")
        self.console.print(
            Panel(
                Text.from_markup("\n".join(lines)),
                title="[bold #8264FF]SolWallet[/]",
                border_style="#14F195",
                padding=(1, 2),
            )
        )
        self.console.print()
        try:
            with patch_stdout(raw=True):
                while True:
                    try:
                        user_input = self.session.prompt(self._prompt_message())
                        self._awaiting_ctrl_c_confirm = False
                    except KeyboardInterrupt:
                        if self._awaiting_ctrl_c_confirm:
                            self.console.print("Exiting SolWallet. Bye!")
                            break
                        self._awaiting_ctrl_c_confirm = True
                        self.console.print("Press Ctrl-C again to exit SolWallet.")
                        continue
                    except EOFError:
                        self.console.print("Exiting SolWallet. Bye!")
                        break

                    response = self.handle_line(user_input)
                    for role, message in response.messages:
                        self._render_message(role, message)
                    if not response.continue_loop:
                        break
        finally:
            self.shutdown()

    def handle_line(self, raw_line: str) -> CommandResponse:
        """Handle a single line of user input (used by tests and run loop)."""
        raw_line = raw_line.strip()
        if not raw_line:
            return CommandResponse(messages=[])
        if not raw_line.startswith("/"):
            return CommandResponse(messages=[("system", "Commands start with '/'. Type /help for a list of commands.")])
        logger.debug("Processing slash command: %s", raw_line)
        try:
            response = self.command_router.dispatch(self, raw_line[1:])
        except SolWalletError as exc:
            logger.debug("Command failed", exc_info=True)
            self.log_event("system", f"{raw_line.split()[0]} failed: {exc}", severity="error")
            response = CommandResponse(messages=[("error", str(exc))])
        self._refresh_status_bar()
        return response

    def shutdown(self) -> None:
        """Stop background polling; safe to call more than once."""
        if self._poll_handle is not None:
            self._poll_handle.cancel()
            self._poll_handle = None

    def log_event(self, category: str, message: str, *, severity: str = "info") -> LogEntry:
        """Record an operational event in the shared log buffer."""
        return self.log_buffer.record(category, message, severity=severity)

    # ------------------------------------------------------------------
    # Service factories
    # ------------------------------------------------------------------
    def rpc_client(self, endpoint: str | None = None) -> SolanaRPCClient:
        """Return a client bound to `endpoint` or the registry's active endpoint."""
        return SolanaRPCClient(
            endpoint=endpoint or self.registry.active_endpoint(),
            timeout=self.config.rpc_timeout,
            commitment=self.config.commitment,
            _request=self._rpc_request,
        )

    def make_executor(self, *, progress: Any = None) -> SequentialTransactionExecutor:
        return SequentialTransactionExecutor(
            self.registry,
            self.rpc_client,
            progress=progress or self._print_progress,
            stop_on_network_error=self.config.stop_batch_on_network_error,
        )

    def operation_options(self) -> dict[str, float]:
        return {
            "confirm_timeout": self.config.confirm_timeout_secs,
            "poll_interval": self.config.confirm_poll_interval,
        }

    def refresh_balance(self) -> Decimal | None:
        status = self.wallet_manager.status()
        self.balance = self.balance_poller.poll_once(status.public_key) if status.public_key else None
        self._refresh_status_bar()
        return self.balance

    def restart_balance_polling(self) -> None:
        """(Re)start polling for the current wallet address; stops it when there is none."""
        self.shutdown()
        status = self.wallet_manager.status()
        if not status.public_key:
            self.balance = None
            return
        if not self._polling_enabled:
            return
        self._poll_handle = self.balance_poller.start(status.public_key, self._on_balance)

    def persist_network_selection(self) -> None:
        selected = self.registry.selected_network().id
        self.config.network = selected
        if self.config_manager is None:
            return
        try:
            self.config_manager.update(network=selected)
        except SolWalletError as exc:
            logger.warning("Failed to persist network selection: %s", exc)

    # ------------------------------------------------------------------
    # Prompt helpers
    # ------------------------------------------------------------------
    def _prompt_secret(self, message: str, *, confirmation: bool = False) -> str:
        return prompt_secret(self.session, self.console, message, confirmation=confirmation)

    def _prompt_text(self, message: str) -> str:
        return prompt_text(self.session, message)

    def _confirm(self, message: str) -> bool:
        return prompt_confirm(self.session, message)

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------
    def _on_balance(self, balance: Decimal | None) -> None:
        self.balance = balance
        self._refresh_status_bar()

    def _print_progress(self, progress: BatchProgress) -> None:
        self.console.print(
            f"[solwallet.text.secondary]{progress.completed_count}/{progress.total_count} processed "
            f"({progress.success_count} ok, {progress.failed_count} failed)[/]"
        )

    def _render_message(self, role: str, message: str) -> None:
        self.console.print(create_message_panel(role, message))

    def _refresh_status_bar(self) -> None:
        if not self.status_bar.supports_toolbar:
            return
        application = getattr(self.session, "app", None)
        if getattr(application, "is_running", False):
            application.invalidate()

    def _render_banner(self) -> None:
        render_banner(self.console, animate=self._color_enabled)

    def _prompt_message(self) -> ANSI | str:
        if not self._color_enabled:
            return "➤ "
        return ANSI("\x1b[38;2;168;85;247m➤\x1b[0m ")

    def _print_rich(self, *objects: Any, **kwargs: Any) -> None:
        """Print using Rich console, handling both REPL and non-REPL contexts."""
        app = getattr(self.session, "app", None)
        is_running = bool(getattr(app, "is_running", False)) if app is not None else False

        if is_running:
            # patch_stdout() is active; write to the unpatched stream
            buffer = StringIO()
            temp_console = Console(
                file=buffer,
                force_terminal=True,
                width=self._console.width or 120,
                legacy_windows=False,
                force_interactive=False,
            )
            temp_console.push_theme(SOLWALLET_THEME)
            temp_console.print(*objects, **kwargs)
            output = buffer.getvalue()
            if output:
                sys.__stdout__.write(output)
                sys.__stdout__.flush()
        else:
            self._console.print(*objects, **kwargs)

    @staticmethod
    def _default_console() -> Console:
        force_style = os.environ.get("SOLWALLET_FORCE_COLOR")
        no_color = os.environ.get("SOLWALLET_NO_COLOR") is not None or os.environ.get("NO_COLOR") is not None
        if force_style:
            console = themed_console(force_terminal=True)
        elif no_color or not sys.stdout.isatty():
            console = themed_console(no_color=True, force_terminal=False, color_system=None)
        else:
            console = themed_console()
        console._solwallet_theme_applied = True
        return console


__all__ = ["CLIApp", "DEFAULT_HISTORY_PATH"]
