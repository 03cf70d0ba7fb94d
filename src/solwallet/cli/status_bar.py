"""Rich-powered status bar rendering for the SolWallet CLI."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

from prompt_toolkit.formatted_text import ANSI
from rich.console import Console
from rich.text import Text

if TYPE_CHECKING:  # pragma: no cover
    from solwallet.core.logs import LogBuffer
    from solwallet.core.networks import NetworkConfigRegistry
    from solwallet.solana.wallet import WalletManager


@dataclass(slots=True)
class StatusSnapshot:
    """Materialised status information for display and testing."""

    network: str
    wallet: str
    balance: str
    last_log: str | None = None

    def _fields(self) -> list[tuple[str, str, str, str]]:
        fields = [
            ("Network", self.network, "bold #8264FF", "#cbd5f5"),
            ("Wallet", self.wallet, "bold #22D3EE", "#bae6fd"),
            ("Balance", self.balance, "bold #5EEAD4", "#a7f3d0"),
        ]
        if self.last_log is not None:
            fields.append(("Last Log", self.last_log, "bold #F472B6", "#fbcfe8"))
        return fields

    def to_text(self) -> Text:
        text = Text()
        separator = Text(" │ ", style="dim")
        for idx, (label, value, label_style, value_style) in enumerate(self._fields()):
            if idx:
                text.append_text(separator)
            text.append(f"{label}: ", style=label_style)
            text.append(value, style=value_style)
        return text

    def to_plain(self) -> str:
        return " | ".join(f"{label}: {value}" for label, value, _, _ in self._fields())


class StatusBar:
    """Produces a Rich-rendered status line for the CLI bottom toolbar."""

    def __init__(
        self,
        *,
        console: Console,
        registry: NetworkConfigRegistry,
        wallet_manager: WalletManager,
        balance_resolver: Callable[[], Decimal | None] | None = None,
        log_buffer: LogBuffer | None = None,
    ) -> None:
        self._console = console
        self._registry = registry
        self._wallet_manager = wallet_manager
        self._balance_resolver = balance_resolver or (lambda: None)
        self._log_buffer = log_buffer
        self._supports_toolbar = console.is_terminal

    @property
    def supports_toolbar(self) -> bool:
        return self._supports_toolbar

    def set_toolbar_support(self, value: bool) -> None:
        self._supports_toolbar = value

    def snapshot(self) -> StatusSnapshot:
        network = self._registry.selected_network().name
        status = self._wallet_manager.status()
        if not status.exists:
            wallet_display = "missing wallet ⚠️"
        elif status.is_unlocked:
            wallet_display = f"connected ({status.masked_address}) ✅"
        else:
            wallet_display = f"locked ({status.masked_address}) 🔒"
        balance = self._balance_resolver()
        balance_display = f"{balance:.4f} SOL" if balance is not None else "--"
        last_log = None
        if self._log_buffer is not None:
            entry = self._log_buffer.latest()
            if entry is not None:
                last_log = f"{entry.category}/{entry.severity.upper()}"
        return StatusSnapshot(network=network, wallet=wallet_display, balance=balance_display, last_log=last_log)

    def render_text(self) -> Text:
        return self.snapshot().to_text()

    def render_plain(self) -> str:
        return self.snapshot().to_plain()

    def toolbar(self) -> ANSI | str:
        if not self.supports_toolbar:
            return ""
        with self._console.capture() as capture:
            self._console.print(self.render_text(), end="")
        return ANSI(capture.get())


__all__ = ["StatusBar", "StatusSnapshot"]
